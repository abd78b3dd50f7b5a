"""Debounced, cancellation-aware scheduling of search-as-you-type calls."""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

QueryT = TypeVar("QueryT")
ResultT = TypeVar("ResultT")

DEFAULT_MAX_SESSIONS = 256

_logger = logging.getLogger(__name__)


@dataclass
class SearchScheduler(Generic[QueryT, ResultT]):
    """Runs only the most recent query after a quiet interval.

    Submitting a new query cancels the pending or in-flight one; the
    superseded `submit` call returns None. Failures are not retried.
    """

    search: Callable[[QueryT], Awaitable[ResultT]]
    quiet_seconds: float = 0.35
    _current: "asyncio.Task[ResultT] | None" = field(default=None, init=False)

    async def submit(self, query: QueryT) -> ResultT | None:
        """Schedule a search and wait for it unless it gets superseded."""
        self.cancel()
        task = asyncio.create_task(self._run(query))
        self._current = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        if task.cancelled():
            _logger.debug("Search for %r superseded", query)
            return None
        return task.result()

    def cancel(self) -> None:
        """Cancel the pending or in-flight search, if any."""
        if self._current is not None and not self._current.done():
            self._current.cancel()
        self._current = None

    async def _run(self, query: QueryT) -> ResultT:
        await asyncio.sleep(self.quiet_seconds)
        return await self.search(query)


@dataclass
class SearchSessions(Generic[QueryT, ResultT]):
    """One scheduler per client session, least recently used evicted first.

    Queries from the same session supersede each other; sessions never
    interfere.
    """

    search: Callable[[QueryT], Awaitable[ResultT]]
    quiet_seconds: float = 0.35
    max_sessions: int = DEFAULT_MAX_SESSIONS
    _schedulers: "OrderedDict[str, SearchScheduler[QueryT, ResultT]]" = field(
        default_factory=OrderedDict, init=False
    )

    def scheduler(self, session_id: str) -> SearchScheduler[QueryT, ResultT]:
        scheduler = self._schedulers.pop(session_id, None)
        if scheduler is None:
            scheduler = SearchScheduler(
                search=self.search, quiet_seconds=self.quiet_seconds
            )
        self._schedulers[session_id] = scheduler
        while len(self._schedulers) > self.max_sessions:
            self._schedulers.popitem(last=False)
        return scheduler

    async def submit(self, session_id: str, query: QueryT) -> ResultT | None:
        """Run a session's query unless a newer one from that session wins."""
        return await self.scheduler(session_id).submit(query)

    def __len__(self) -> int:
        return len(self._schedulers)
