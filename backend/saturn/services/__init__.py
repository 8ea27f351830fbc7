"""
Service layer modules.
"""
