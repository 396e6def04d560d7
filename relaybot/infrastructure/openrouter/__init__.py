"""
OpenRouter infrastructure.
"""

from .client import OpenRouterAdapter

__all__ = ['OpenRouterAdapter']
