"""
Progression module: level curves, stat growth at battle start, battle
results and exercise progression.
"""
