"""
Endpoint modules for API v1, one router per domain.
"""
