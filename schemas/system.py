"""
System status API models.
"""

from typing import Dict

from pydantic import BaseModel


class SystemStatus(BaseModel):
    """System status"""

    status: str
    uptime: float
    memory_usage: Dict[str, float]
    backend: str
    max_workers: int
    active_batches: int


class DebugSettings(BaseModel):
    """Debug mode settings"""

    enabled: bool
    verbose_logging: bool
