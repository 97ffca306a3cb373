"""
Service layer.

Each service is a class of async classmethods holding the business
rules of one domain.  Services take the authenticated user payload,
apply ``core.policy`` and raise ``core.errors.ServiceError`` subclasses,
which the application maps to HTTP responses.
"""
