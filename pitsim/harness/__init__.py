"""
Monte Carlo harness: encounters, scenarios, statistics and reports.
"""
