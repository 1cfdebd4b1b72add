"""
blogql backend
GraphQL API for a small blogging application
"""

__version__ = "0.1.0"

from .config import settings

__all__ = ["settings", "__version__"]
