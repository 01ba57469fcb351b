"""
Static definitions and runtime combatants.
"""
