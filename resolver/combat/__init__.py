"""
Combat system module of the turn-based combat resolver.

This module handles the combat mechanics: damage, healing and shields,
positional targeting, turn order management and the enemy AI.
"""
