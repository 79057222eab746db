"""
Effects module of the turn-based combat resolver.

Skill effect variants, queued status effects and the scheduler that ticks
them at the start and end of a unit's turn.
"""
