"""
Action pipelines: basic attacks, skills and items.
"""
