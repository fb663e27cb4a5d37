"""
Health check response schema.
"""

from pydantic import BaseModel
from typing import Dict


class HealthResponse(BaseModel):
    """Overall status plus one entry per check (``database``, ``exchange_rates``)."""
    status: str
    uptime: str
    checks: Dict[str, str] = {}
