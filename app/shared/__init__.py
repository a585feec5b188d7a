"""
Shared module package.

Cross-cutting concerns used by every router:
- Domain error to HTTP mapping
- Security headers and rate limiting
- Logging configuration
"""
