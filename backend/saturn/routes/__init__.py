"""
HTTP routes for the Saturn service.
"""
