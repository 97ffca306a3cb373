"""
Cross-cutting pieces: settings, logging, storage, errors, security and
the authorization policy.
"""
