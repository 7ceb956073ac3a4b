"""
Watch event models.

Defines the event emitted by a watcher when a watched path's fingerprint
changes between polls.
"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class WatchEvent(BaseModel):
    """A detected change at a watched path"""
    model_config = ConfigDict(frozen=True)

    path: str
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization"""
        return {
            "path": self.path,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"CHANGED: {self.path} at {self.timestamp.isoformat()}"
