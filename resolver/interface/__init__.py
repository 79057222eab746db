"""
Entry points called by the host, one per resolution step.
"""
