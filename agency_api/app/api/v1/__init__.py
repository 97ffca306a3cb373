"""
Version 1 of the agency API.  ``router`` aggregates every domain.
"""
