"""
Base service class.
Services hold the currency and reporting rules and work through repositories.
"""

from abc import ABC


class BaseService(ABC):
    """Common parent of the domain services."""
