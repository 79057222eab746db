"""
Battle document module of the turn-based combat resolver.

This module holds the pydantic models of the documents exchanged with the
host: the battle state with its units and commands, the progression data
and the battle result summary.
"""
