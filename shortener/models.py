"""Data models for URL shortener."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class AccessEvent:
    """One followed redirect of a live mapping."""

    timestamp: datetime
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
        }


@dataclass
class URLMapping:
    """Represents a short code to URL binding held by the registry."""

    short_code: str
    original_url: str
    created_at: datetime
    expiry_at: datetime
    validity_minutes: int
    access_count: int = 0
    access_log: List[AccessEvent] = field(default_factory=list)

    def is_live(self, now: datetime) -> bool:
        """Check whether the mapping is still valid at ``now``."""
        return now < self.expiry_at

    @property
    def last_accessed(self) -> Optional[datetime]:
        return self.access_log[-1].timestamp if self.access_log else None

    def snapshot(self) -> "URLMapping":
        """Copy detached from registry state (events are immutable)."""
        return replace(self, access_log=list(self.access_log))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "short_code": self.short_code,
            "original_url": self.original_url,
            "created_at": self.created_at.isoformat(),
            "expiry_at": self.expiry_at.isoformat(),
            "validity_minutes": self.validity_minutes,
            "access_count": self.access_count,
            "last_accessed": self.last_accessed.isoformat() if self.last_accessed else None,
        }
