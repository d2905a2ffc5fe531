"""
Middleware Package

Contains application middleware components.
"""

from nim_proxy.middleware.body_limit import BodySizeLimitMiddleware

__all__ = ["BodySizeLimitMiddleware"]
