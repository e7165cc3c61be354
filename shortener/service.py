"""Business logic service for URL shortener."""

import logging
from typing import Optional, Dict, Any, List

from .registry import URLRegistry
from .models import URLMapping
from .errors import CodeConflictError, CodeGenerationExhaustedError
from .common.validators import is_valid_url, is_valid_short_code, is_valid_validity


class URLShortenerService:
    """Service layer for URL shortening business logic."""

    def __init__(
        self,
        registry: URLRegistry,
        logger: Optional[logging.Logger] = None,
        enable_custom_codes: bool = True,
        default_validity_minutes: int = 30,
        max_validity_minutes: int = 525600,
        recent_clicks_limit: int = 10,
    ):
        """Initialize URL shortener service.

        Args:
            registry: Registry owning all mappings
            logger: Optional logger
            enable_custom_codes: Whether to allow custom short codes
            default_validity_minutes: Lifetime used when none is requested
            max_validity_minutes: Upper bound for requested lifetimes
            recent_clicks_limit: Access events included in analytics
        """
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)
        self.enable_custom_codes = enable_custom_codes
        self.default_validity_minutes = default_validity_minutes
        self.max_validity_minutes = max_validity_minutes
        self.recent_clicks_limit = recent_clicks_limit

    async def create_short_url(
        self,
        original_url: str,
        validity_minutes: Optional[int] = None,
        custom_code: Optional[str] = None,
    ) -> URLMapping:
        """Create a new short URL.

        Args:
            original_url: The original long URL
            validity_minutes: Lifetime in minutes (default if not specified)
            custom_code: Optional custom short code

        Returns:
            The stored mapping

        Raises:
            ValueError: If validation fails
            CodeConflictError: If the custom code already exists
            CodeGenerationExhaustedError: If no free code could be generated
        """
        self.logger.info(
            f"Creating short URL: url={original_url} custom_code={custom_code} "
            f"validity={validity_minutes}"
        )

        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            self.logger.warning(f"Invalid URL rejected: {error}")
            raise ValueError(f"Invalid URL: {error}")

        if validity_minutes is None:
            validity_minutes = self.default_validity_minutes
        is_valid, error = is_valid_validity(validity_minutes, self.max_validity_minutes)
        if not is_valid:
            self.logger.warning(f"Invalid validity rejected: {error}")
            raise ValueError(f"Invalid validity: {error}")

        if custom_code:
            if not self.enable_custom_codes:
                raise ValueError("Custom short codes are not enabled")

            is_valid, error = is_valid_short_code(custom_code)
            if not is_valid:
                self.logger.warning(f"Invalid custom code rejected: {error}")
                raise ValueError(f"Invalid short code: {error}")
        else:
            custom_code = None

        try:
            mapping = self.registry.create_mapping(
                original_url,
                validity_minutes,
                requested_code=custom_code,
            )
        except CodeConflictError:
            self.logger.warning(f"Custom short code already exists: {custom_code}")
            raise
        except CodeGenerationExhaustedError as e:
            self.logger.error(f"Short code generation exhausted: {e}")
            raise

        self.logger.info(
            f"Created short URL: {mapping.short_code} -> {original_url} "
            f"(expires {mapping.expiry_at.isoformat()})"
        )
        return mapping

    async def get_original_url(
        self,
        short_code: str,
        client_ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        increment_count: bool = True,
    ) -> Optional[str]:
        """Get the original URL for a live short code.

        Args:
            short_code: The short code to lookup
            client_ip: Client address recorded with the access
            user_agent: Client user agent recorded with the access
            increment_count: Whether to record the access

        Returns:
            Original URL or None if not found or expired
        """
        mapping = self.registry.resolve(short_code)

        if mapping is None:
            self.logger.warning(f"Short code not found or expired: {short_code}")
            return None

        # The mapping may expire between resolve and record; the redirect
        # still goes ahead with the URL resolved while it was live.
        if increment_count and not self.registry.record_access(short_code, client_ip, user_agent):
            self.logger.debug(f"Access not recorded, {short_code} expired after resolve")

        self.logger.debug(f"Retrieved URL: {short_code} -> {mapping.original_url}")
        return mapping.original_url

    async def get_url_info(self, short_code: str) -> Optional[URLMapping]:
        """Get the stored mapping, live or expired.

        Args:
            short_code: The short code to lookup

        Returns:
            Mapping snapshot or None
        """
        return self.registry.find(short_code)

    async def is_expired(self, short_code: str) -> bool:
        """True if the code is still stored but no longer live."""
        mapping = self.registry.find(short_code)
        return mapping is not None and not mapping.is_live(self.registry.now())

    async def get_analytics(self, short_code: str) -> Optional[Dict[str, Any]]:
        """Get click analytics for a short code.

        Args:
            short_code: The short code to lookup

        Returns:
            Dictionary with click totals and recent clicks, or None
        """
        mapping = self.registry.find(short_code)
        if mapping is None:
            self.logger.warning(f"Analytics not found for short code: {short_code}")
            return None

        unique_clients = {event.client_ip for event in mapping.access_log if event.client_ip}
        recent = mapping.access_log[-self.recent_clicks_limit:] if self.recent_clicks_limit > 0 else []

        return {
            "short_code": mapping.short_code,
            "original_url": mapping.original_url,
            "created_at": mapping.created_at,
            "expiry_at": mapping.expiry_at,
            "is_active": mapping.is_live(self.registry.now()),
            "total_clicks": mapping.access_count,
            "unique_clicks": len(unique_clients),
            "recent_clicks": recent,
        }

    async def list_urls(self, include_expired: bool = False) -> List[URLMapping]:
        """List stored mappings in creation order.

        Args:
            include_expired: Also list expired mappings not yet cleaned up

        Returns:
            List of mapping snapshots
        """
        mappings = self.registry.list_all(include_expired=include_expired)
        self.logger.debug(f"Listed {len(mappings)} mappings (include_expired={include_expired})")
        return mappings

    async def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics.

        Returns:
            Dictionary with statistics
        """
        now = self.registry.now()
        mappings = self.registry.list_all(include_expired=True)
        live = sum(1 for m in mappings if m.is_live(now))

        return {
            "total_urls": len(mappings),
            "live_urls": live,
            "expired_urls": len(mappings) - live,
            "total_accesses": sum(m.access_count for m in mappings),
            "custom_codes_enabled": self.enable_custom_codes,
        }

    async def cleanup_expired(self) -> int:
        """Remove expired mappings.

        Returns:
            Number of mappings removed
        """
        removed = self.registry.cleanup_expired()
        self.logger.info(f"Cleanup completed: {removed} expired URLs removed")
        return removed

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        try:
            len(self.registry)
            registry_healthy = True
        except Exception:
            self.logger.exception("Registry health check failed")
            registry_healthy = False

        return {
            "registry": registry_healthy,
            "overall": registry_healthy,
        }
