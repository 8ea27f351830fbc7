"""
Core application modules.
Contains configuration, structured logging, metrics and HTTP middleware.
"""
