"""
Middleware package.
"""

from realty.middleware.csrf import CSRFMiddleware

__all__ = ["CSRFMiddleware"]
