"""
Boolean classifiers used as decision points by the orchestrator.
"""
