"""Idle-time, deduplicated prefetching of image variants."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterator, List, Optional, Protocol, Set, Tuple

from .config import GalleryConfig
from .models import PrefetchResult, ProbeRequest
from .variants import build_responsive_candidates, build_sized_url, strip_size_params

logger = logging.getLogger("product_gallery")

Callback = Callable[[], None]


class ImageProbe(Protocol):
    """Anything that can warm the resource cache for an image request."""

    def warm(self, request: ProbeRequest) -> None:
        ...


class Deferrer(Protocol):
    def defer(self, callback: Callback) -> None:
        ...


class IdleDeferrer:
    """Runs work when the host reports idle time, or once ``timeout`` passes."""

    def __init__(self, host: Any, timeout: float) -> None:
        self.host = host
        self.timeout = timeout

    def defer(self, callback: Callback) -> None:
        self.host.request_idle_callback(callback, timeout=self.timeout)


class DelayDeferrer:
    """Runs work after a fixed delay on an event loop exposing ``call_later``."""

    def __init__(self, host: Any, delay: float) -> None:
        self.host = host
        self.delay = delay

    def defer(self, callback: Callback) -> None:
        self.host.call_later(self.delay, callback)


def select_deferrer(host: Any, config: Optional[GalleryConfig] = None) -> Deferrer:
    """Pick the deferral strategy the host supports, preferring idle callbacks."""
    config = config or GalleryConfig()
    if callable(getattr(host, "request_idle_callback", None)):
        logger.debug("Using idle-time prefetch scheduling")
        return IdleDeferrer(host, config.idle_timeout)
    if callable(getattr(host, "call_later", None)):
        logger.debug("Idle callbacks unavailable; prefetching after %.3fs", config.fallback_delay)
        return DelayDeferrer(host, config.fallback_delay)
    raise TypeError(f"{type(host).__name__} supports neither idle callbacks nor call_later")


class IdleQueue:
    """In-process idle host: callbacks run when the owner signals idle time."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._pending: List[Tuple[float, Callback]] = []

    def __len__(self) -> int:
        return len(self._pending)

    def request_idle_callback(self, callback: Callback, timeout: float) -> None:
        self._pending.append((self._clock() + timeout, callback))

    def run_idle(self) -> int:
        """Run every pending callback, including ones queued while draining."""
        ran = 0
        while self._pending:
            _, callback = self._pending.pop(0)
            callback()
            ran += 1
        return ran

    def run_expired(self) -> int:
        """Run only the callbacks whose timeout has elapsed."""
        now = self._clock()
        expired = [entry for entry in self._pending if entry[0] <= now]
        self._pending = [entry for entry in self._pending if entry[0] > now]
        for _, callback in expired:
            callback()
        return len(expired)


class PrefetchCache:
    """Append-only set of normalized URLs already handed to the scheduler."""

    def __init__(self) -> None:
        self._urls: Set[str] = set()

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._urls))

    def add(self, url: str) -> None:
        self._urls.add(url)

    def clear(self) -> None:
        self._urls.clear()


class PrefetchScheduler:
    """Schedules best-effort warm-up probes, at most one per normalized URL."""

    def __init__(
        self,
        deferrer: Deferrer,
        probe: ImageProbe,
        config: Optional[GalleryConfig] = None,
        cache: Optional[PrefetchCache] = None,
    ) -> None:
        self.deferrer = deferrer
        self.probe = probe
        self.config = config or GalleryConfig()
        self.cache = cache if cache is not None else PrefetchCache()
        self.probes_issued = 0
        self.probes_failed = 0

    def schedule(self, maybe_url: object) -> PrefetchResult:
        base_url = strip_size_params(maybe_url)
        if not base_url:
            return PrefetchResult.SKIPPED
        if base_url in self.cache:
            return PrefetchResult.DEDUPLICATED
        # Insert before deferring so a second call in the same turn sees it.
        self.cache.add(base_url)
        try:
            self.deferrer.defer(lambda: self._run_probe(base_url))
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("Could not defer prefetch of %s: %s", base_url, exc)
            return PrefetchResult.FAILED
        return PrefetchResult.SCHEDULED

    def _build_request(self, base_url: str) -> ProbeRequest:
        request = ProbeRequest(
            src=build_sized_url(base_url, self.config.smallest_width) or base_url,
            candidates=build_responsive_candidates(base_url, self.config.widths),
            sizes=self.config.sizes,
        )
        if getattr(self.probe, "supports_fetch_priority", False):
            request.fetch_priority = "low"
        return request

    def _run_probe(self, base_url: str) -> None:
        self.probes_issued += 1
        try:
            self.probe.warm(self._build_request(base_url))
        except Exception as exc:  # pylint: disable=broad-except
            self.probes_failed += 1
            logger.debug("Prefetch of %s failed: %s", base_url, exc)
        else:
            logger.debug("Prefetched %s", base_url)
