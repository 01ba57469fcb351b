"""
Turn-based roguelike combat simulation core and its Monte Carlo balance harness.
"""

__version__ = "0.1.0"
