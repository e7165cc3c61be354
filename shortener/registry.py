"""In-memory registry of short code mappings.

The registry is the single owner of mapping and analytics state. Every public
operation runs under one coarse lock, so a code-existence check and the
insertion that follows it, or a counter increment and its log append, are
never interleaved with another caller. Liveness is derived from timestamps on
every read; ``cleanup_expired`` only reclaims space.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .errors import CodeConflictError, CodeGenerationExhaustedError, RegistryInvariantError
from .models import AccessEvent, URLMapping
from .shortcode import ShortCodeGenerator


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class URLRegistry:
    """Thread-safe store of URL mappings with time-bounded validity."""

    def __init__(
        self,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        max_generation_attempts: int = 10,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize an empty registry.

        Args:
            short_code_generator: Source of random candidate codes
            max_generation_attempts: Candidates tried before giving up
            clock: Callable returning the current aware UTC datetime
            logger: Optional logger
        """
        if max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be at least 1")

        self.generator = short_code_generator or ShortCodeGenerator()
        self.max_generation_attempts = max_generation_attempts
        self.clock = clock or utc_now
        self.logger = logger or logging.getLogger(__name__)

        # dict keeps insertion order, which list_all relies on
        self._mappings: Dict[str, URLMapping] = {}
        self._lock = threading.Lock()

    def now(self) -> datetime:
        """Current time according to the registry clock."""
        return self.clock()

    def create_mapping(
        self,
        original_url: str,
        validity_minutes: int,
        requested_code: Optional[str] = None,
    ) -> URLMapping:
        """Store a new mapping and return a snapshot of it.

        Args:
            original_url: Pre-validated absolute http(s) URL
            validity_minutes: Positive lifetime in minutes
            requested_code: Optional caller-chosen short code

        Returns:
            Snapshot of the stored mapping

        Raises:
            CodeConflictError: If ``requested_code`` is already stored
            CodeGenerationExhaustedError: If every generated candidate collided
        """
        if validity_minutes <= 0:
            raise ValueError("validity_minutes must be positive")

        with self._lock:
            if requested_code is not None:
                if requested_code in self._mappings:
                    raise CodeConflictError(requested_code)
                short_code = requested_code
            else:
                short_code = self._generate_unique_code()

            created_at = self.clock()
            mapping = URLMapping(
                short_code=short_code,
                original_url=original_url,
                created_at=created_at,
                expiry_at=created_at + timedelta(minutes=validity_minutes),
                validity_minutes=validity_minutes,
            )
            self._insert(mapping)
            snapshot = mapping.snapshot()

        self.logger.debug(f"Stored mapping {short_code} (expires {snapshot.expiry_at.isoformat()})")
        return snapshot

    def resolve(self, short_code: str) -> Optional[URLMapping]:
        """Return a snapshot of the live mapping for ``short_code``, or None.

        Expired mappings resolve to None even while still stored. Does not
        record an access.
        """
        with self._lock:
            mapping = self._mappings.get(short_code)
            if mapping is None or not mapping.is_live(self.clock()):
                return None
            return mapping.snapshot()

    def find(self, short_code: str) -> Optional[URLMapping]:
        """Return a snapshot of the stored mapping whether live or expired."""
        with self._lock:
            mapping = self._mappings.get(short_code)
            return mapping.snapshot() if mapping else None

    def record_access(
        self,
        short_code: str,
        client_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        """Count one access to a live mapping.

        Returns:
            True if recorded, False if the code is absent or expired
        """
        with self._lock:
            now = self.clock()
            mapping = self._mappings.get(short_code)
            if mapping is None or not mapping.is_live(now):
                return False

            mapping.access_count += 1
            mapping.access_log.append(
                AccessEvent(timestamp=now, client_ip=client_ip, user_agent=user_agent)
            )
            return True

    def list_all(self, include_expired: bool = False) -> List[URLMapping]:
        """Snapshot of stored mappings in insertion order.

        Args:
            include_expired: Also return expired mappings not yet swept
        """
        with self._lock:
            now = self.clock()
            return [
                mapping.snapshot()
                for mapping in self._mappings.values()
                if include_expired or mapping.is_live(now)
            ]

    def cleanup_expired(self) -> int:
        """Remove every mapping whose expiry has passed.

        Returns:
            Number of mappings removed
        """
        with self._lock:
            now = self.clock()
            expired = [
                code for code, mapping in self._mappings.items()
                if not mapping.is_live(now)
            ]
            for code in expired:
                del self._mappings[code]

        if expired:
            self.logger.debug(f"Removed {len(expired)} expired mappings")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._mappings)

    def __contains__(self, short_code: object) -> bool:
        with self._lock:
            return short_code in self._mappings

    def _generate_unique_code(self) -> str:
        """Draw random candidates until one is free. Caller holds the lock."""
        for attempt in range(1, self.max_generation_attempts + 1):
            code = self.generator.generate_random()
            if code not in self._mappings and not self.generator.is_reserved(code):
                if attempt > 1:
                    self.logger.debug(f"Generated code after {attempt} attempts: {code}")
                return code

        self.logger.error(
            f"Failed to generate unique short code after {self.max_generation_attempts} attempts"
        )
        raise CodeGenerationExhaustedError(self.max_generation_attempts)

    def _insert(self, mapping: URLMapping) -> None:
        """Bind a mapping. Caller holds the lock and has checked the code."""
        if mapping.short_code in self._mappings:
            raise RegistryInvariantError(
                f"Short code '{mapping.short_code}' already bound after uniqueness check"
            )
        self._mappings[mapping.short_code] = mapping
