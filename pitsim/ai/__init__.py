"""
Goal-driven AI: decision context, built-in goals and the decision engine.
"""
