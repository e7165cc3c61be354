"""Tests for the in-memory URL registry."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from shortener.errors import CodeConflictError, CodeGenerationExhaustedError, RegistryInvariantError
from shortener.models import URLMapping
from shortener.registry import URLRegistry
from tests.conftest import FixedCodeGenerator


class TestCreateAndResolve:
    """Creation and lookup of mappings."""

    def test_create_then_resolve(self, registry):
        """A fresh mapping resolves to its URL with no accesses."""
        created = registry.create_mapping("https://example.com/a", 30, "abc123")
        resolved = registry.resolve("abc123")

        assert resolved is not None
        assert resolved.original_url == "https://example.com/a"
        assert resolved.access_count == 0
        assert resolved.access_log == []
        assert created.short_code == "abc123"

    def test_expiry_computed_from_validity(self, registry, clock):
        """Expiry is creation time plus validity."""
        mapping = registry.create_mapping("https://example.com", 45)

        assert mapping.created_at == clock.current
        assert (mapping.expiry_at - mapping.created_at).total_seconds() == 45 * 60
        assert mapping.validity_minutes == 45

    def test_generated_code_format(self, registry):
        """Generated codes are six alphanumeric characters."""
        mapping = registry.create_mapping("https://example.com", 30)

        assert len(mapping.short_code) == 6
        assert mapping.short_code.isalnum()

    def test_duplicate_requested_code(self, registry):
        """The second create with the same code conflicts."""
        registry.create_mapping("https://example.com/1", 30, "dup123")

        with pytest.raises(CodeConflictError) as exc_info:
            registry.create_mapping("https://example.com/2", 30, "dup123")

        assert exc_info.value.short_code == "dup123"
        assert registry.resolve("dup123").original_url == "https://example.com/1"

    def test_expired_but_retained_code_still_conflicts(self, registry, clock):
        """Codes are not reused while the expired mapping is still stored."""
        registry.create_mapping("https://example.com/1", 1, "old123")
        clock.advance(minutes=2)

        with pytest.raises(CodeConflictError):
            registry.create_mapping("https://example.com/2", 30, "old123")

    def test_code_reusable_after_cleanup(self, registry, clock):
        """Once swept, a code can be bound again."""
        registry.create_mapping("https://example.com/1", 1, "old123")
        clock.advance(minutes=2)
        registry.cleanup_expired()

        mapping = registry.create_mapping("https://example.com/2", 30, "old123")

        assert mapping.original_url == "https://example.com/2"

    def test_non_positive_validity_rejected(self, registry):
        """Validity must be strictly positive."""
        with pytest.raises(ValueError):
            registry.create_mapping("https://example.com", 0)

        assert len(registry) == 0

    def test_resolve_unknown(self, registry):
        """Unknown codes resolve to None."""
        assert registry.resolve("nope123") is None
        assert registry.find("nope123") is None

    def test_thousand_generated_codes_distinct(self, logger):
        """Random generation does not collide or exhaust under normal load."""
        registry = URLRegistry(logger=logger)

        codes = {
            registry.create_mapping(f"https://example.com/{i}", 30).short_code
            for i in range(1000)
        }

        assert len(codes) == 1000
        assert len(registry) == 1000

    def test_list_contains_requested_code(self, registry):
        """A created mapping appears exactly once in the live listing."""
        registry.create_mapping("https://example.com", 30, "abc123")

        listed = [m for m in registry.list_all(False) if m.short_code == "abc123"]

        assert len(listed) == 1


class TestCodeGeneration:
    """Bounded retry of random code generation."""

    def test_retries_past_collision(self, clock, logger):
        """A colliding candidate is skipped."""
        generator = FixedCodeGenerator(["taken1", "free22"])
        registry = URLRegistry(short_code_generator=generator, clock=clock, logger=logger)
        registry.create_mapping("https://example.com/1", 30, "taken1")

        mapping = registry.create_mapping("https://example.com/2", 30)

        assert mapping.short_code == "free22"
        assert generator.calls == 2

    def test_exhaustion(self, clock, logger):
        """Every candidate colliding raises after the attempt budget."""
        generator = FixedCodeGenerator(["same00"])
        registry = URLRegistry(
            short_code_generator=generator,
            max_generation_attempts=4,
            clock=clock,
            logger=logger,
        )
        registry.create_mapping("https://example.com/1", 30)

        with pytest.raises(CodeGenerationExhaustedError) as exc_info:
            registry.create_mapping("https://example.com/2", 30)

        assert exc_info.value.attempts == 4
        assert generator.calls == 1 + 4
        assert len(registry) == 1

    def test_reserved_words_skipped(self, clock, logger):
        """Generated codes never shadow reserved route names."""
        generator = FixedCodeGenerator(["Health", "ok1234"], reserved_words={"health"})
        registry = URLRegistry(short_code_generator=generator, clock=clock, logger=logger)

        mapping = registry.create_mapping("https://example.com", 30)

        assert mapping.short_code == "ok1234"

    def test_invalid_attempt_budget(self):
        """At least one attempt is required."""
        with pytest.raises(ValueError):
            URLRegistry(max_generation_attempts=0)


class TestExpiry:
    """Liveness is derived from the clock on every read."""

    def test_resolve_after_expiry(self, registry, clock):
        """One-minute mapping is gone after a minute even before cleanup."""
        registry.create_mapping("https://example.com", 1, "short1")
        clock.advance(minutes=1, seconds=1)

        assert registry.resolve("short1") is None
        assert "short1" in registry
        assert registry.find("short1") is not None

    def test_expiry_boundary_is_exclusive(self, registry, clock):
        """At exactly the expiry instant the mapping is no longer live."""
        registry.create_mapping("https://example.com", 1, "edge01")

        clock.advance(seconds=59)
        assert registry.resolve("edge01") is not None

        clock.advance(seconds=1)
        assert registry.resolve("edge01") is None

    def test_list_excludes_expired(self, registry, clock):
        """Expired mappings only show up when asked for."""
        registry.create_mapping("https://example.com/1", 1, "gone01")
        registry.create_mapping("https://example.com/2", 60, "live01")
        clock.advance(minutes=5)

        assert [m.short_code for m in registry.list_all()] == ["live01"]
        assert [m.short_code for m in registry.list_all(include_expired=True)] == ["gone01", "live01"]


class TestRecordAccess:
    """Access tracking."""

    def test_record_access(self, registry, clock):
        """An access increments the counter and logs client details."""
        registry.create_mapping("https://example.com", 30, "track1")

        assert registry.record_access("track1", client_ip="10.0.0.1", user_agent="pytest")

        mapping = registry.resolve("track1")
        assert mapping.access_count == 1
        event = mapping.access_log[0]
        assert event.timestamp == clock.current
        assert event.client_ip == "10.0.0.1"
        assert event.user_agent == "pytest"

    def test_resolve_does_not_count(self, registry):
        """Resolution alone leaves analytics untouched."""
        registry.create_mapping("https://example.com", 30, "peek01")

        registry.resolve("peek01")
        registry.resolve("peek01")

        assert registry.find("peek01").access_count == 0

    def test_record_access_unknown(self, registry):
        """Unknown codes are not found."""
        assert registry.record_access("nope123") is False

    def test_record_access_expired(self, registry, clock):
        """Expired mappings are not mutated."""
        registry.create_mapping("https://example.com", 1, "late01")
        clock.advance(minutes=2)

        assert registry.record_access("late01") is False
        assert registry.find("late01").access_count == 0

    def test_access_log_preserves_order(self, registry, clock):
        """Events are appended in the order they happen."""
        registry.create_mapping("https://example.com", 30, "order1")
        for i in range(3):
            registry.record_access("order1", client_ip=f"10.0.0.{i}")
            clock.advance(seconds=1)

        log = registry.resolve("order1").access_log
        assert [e.client_ip for e in log] == ["10.0.0.0", "10.0.0.1", "10.0.0.2"]
        assert log[0].timestamp < log[1].timestamp < log[2].timestamp

    def test_concurrent_record_access(self, registry):
        """100 concurrent accesses produce exactly 100 increments and events."""
        registry.create_mapping("https://example.com", 30, "race01")

        with ThreadPoolExecutor(max_workers=32) as pool:
            results = list(pool.map(lambda i: registry.record_access("race01", f"10.0.{i}.1"), range(100)))

        mapping = registry.resolve("race01")
        assert all(results)
        assert mapping.access_count == 100
        assert len(mapping.access_log) == 100


class TestConcurrentCreate:
    """Check-then-insert is atomic."""

    def test_same_requested_code_only_once(self, registry):
        """Racing creates for one code yield one winner and conflicts for the rest."""
        barrier = threading.Barrier(20)

        def attempt(i):
            barrier.wait()
            try:
                registry.create_mapping(f"https://example.com/{i}", 30, "race99")
                return True
            except CodeConflictError:
                return False

        with ThreadPoolExecutor(max_workers=20) as pool:
            outcomes = list(pool.map(attempt, range(20)))

        assert outcomes.count(True) == 1
        assert len(registry) == 1

    def test_concurrent_generated_codes_unique(self, registry):
        """Parallel creates without codes never share a code."""
        with ThreadPoolExecutor(max_workers=16) as pool:
            mappings = list(pool.map(
                lambda i: registry.create_mapping(f"https://example.com/{i}", 30),
                range(200),
            ))

        assert len({m.short_code for m in mappings}) == 200
        assert len(registry) == 200


class TestCleanup:
    """Space reclamation of expired mappings."""

    def test_cleanup_twice(self, registry, clock):
        """First sweep removes expired mappings, second finds nothing."""
        registry.create_mapping("https://example.com/1", 1, "exp001")
        registry.create_mapping("https://example.com/2", 2, "exp002")
        registry.create_mapping("https://example.com/3", 60, "live01")
        clock.advance(minutes=3)

        assert registry.cleanup_expired() == 2
        assert registry.cleanup_expired() == 0
        assert registry.resolve("live01") is not None
        assert "exp001" not in registry

    def test_cleanup_empty(self, registry):
        """Nothing stored, nothing removed."""
        assert registry.cleanup_expired() == 0

    def test_cleanup_keeps_live(self, registry):
        """Live mappings survive a sweep."""
        registry.create_mapping("https://example.com", 30, "keep01")

        assert registry.cleanup_expired() == 0
        assert registry.resolve("keep01") is not None


class TestSnapshots:
    """Returned mappings are detached copies."""

    def test_mutating_snapshot_does_not_leak(self, registry):
        """Changes to a returned mapping never reach the registry."""
        registry.create_mapping("https://example.com", 30, "snap01")
        registry.record_access("snap01")

        snapshot = registry.resolve("snap01")
        snapshot.access_count = 999
        snapshot.access_log.clear()
        snapshot.original_url = "https://evil.example"

        fresh = registry.resolve("snap01")
        assert fresh.access_count == 1
        assert len(fresh.access_log) == 1
        assert fresh.original_url == "https://example.com"

    def test_list_is_snapshot(self, registry):
        """A listing does not change when the registry does."""
        registry.create_mapping("https://example.com", 30, "snap02")
        listing = registry.list_all()

        registry.record_access("snap02")
        registry.create_mapping("https://example.com/2", 30, "snap03")

        assert len(listing) == 1
        assert listing[0].access_count == 0


class TestInvariants:
    """Internal consistency checks."""

    def test_double_insert_is_defect(self, registry, clock):
        """Binding an already stored code is reported as an invariant violation."""
        mapping = registry.create_mapping("https://example.com", 30, "inv001")
        duplicate = URLMapping(
            short_code="inv001",
            original_url="https://other.example",
            created_at=clock.current,
            expiry_at=mapping.expiry_at,
            validity_minutes=30,
        )

        with pytest.raises(RegistryInvariantError):
            registry._insert(duplicate)
