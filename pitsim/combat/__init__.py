"""
Attack and skill resolution, combat events and the energy-based turn scheduler.
"""
