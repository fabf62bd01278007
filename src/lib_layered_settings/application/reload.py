"""Optional hot-reload holder layered on top of the immutable space.

A :class:`ConfigReference` never mutates a space. ``reload`` builds a complete
replacement with the supplied builder and swaps the reference; readers holding
the previous space keep a consistent snapshot.
"""

from __future__ import annotations

import threading
from typing import Callable

from ..domain.space import UnifiedConfigSpace
from ..observability import log_info


class ConfigReference:
    """Atomically swappable reference to the current :class:`UnifiedConfigSpace`.

    Examples
    --------
    >>> generations = iter([UnifiedConfigSpace({"v": 1}, {}), UnifiedConfigSpace({"v": 2}, {})])
    >>> ref = ConfigReference(lambda: next(generations))
    >>> ref.current["v"]
    1
    >>> ref.reload()["v"]
    2
    >>> ref.generation
    2
    """

    def __init__(self, builder: Callable[[], UnifiedConfigSpace]) -> None:
        self._builder = builder
        self._lock = threading.Lock()
        self._current = builder()
        self._generation = 1

    @property
    def current(self) -> UnifiedConfigSpace:
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    def reload(self) -> UnifiedConfigSpace:
        """Build a fresh space and swap it in; on failure the previous space stays.

        Concurrent reloads run one at a time, so the newest build is always the
        one left in place. Readers of :attr:`current` never wait.
        """

        with self._lock:
            replacement = self._builder()
            self._current = replacement
            self._generation += 1
            generation = self._generation
        log_info("configuration_reloaded", generation=generation, keys=len(replacement))
        return replacement
