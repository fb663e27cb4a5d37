"""
Base controller class.
Controllers validate request-level input, call services and build response schemas.
"""

from abc import ABC


class BaseController(ABC):
    """Common parent of the API controllers."""
