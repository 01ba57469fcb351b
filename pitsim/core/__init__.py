"""
Shared infrastructure: constants, configuration, content loading, dice, logging and errors.
"""
