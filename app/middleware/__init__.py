"""
Middleware package for the HomeSphere Real Estate API.
"""

from .validation import ValidationMiddleware

__all__ = ["ValidationMiddleware"]
