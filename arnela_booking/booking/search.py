"""Debounced client search used by the backoffice wizard."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..errors import BookingError
from ..models import ClientSummary

logger = logging.getLogger(__name__)

SEARCH_ERROR_MESSAGE = "Error al buscar clientes"

SearchFn = Callable[[str], Awaitable[List[ClientSummary]]]


class ClientSearch:
    """
    Search-as-you-type over active clients.

    Each keystroke cancels the pending task (debounce timer or in-flight
    request) before scheduling a new one, so at most one search is in
    flight per burst of keystrokes and results never come from an older
    query.
    """

    def __init__(
        self,
        search_fn: SearchFn,
        debounce_ms: int = 300,
        min_chars: int = 2,
    ):
        """
        Initialize client search.

        Args:
            search_fn: Coroutine function performing the backend search
            debounce_ms: Quiet period after the last keystroke before searching
            min_chars: Minimum trimmed query length that triggers a search
        """
        self._search_fn = search_fn
        self.debounce_seconds = debounce_ms / 1000
        self.min_chars = min_chars

        self.query = ""
        self.results: List[ClientSummary] = []
        self.searching = False
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def has_min_chars(self) -> bool:
        return len(self.query.strip()) >= self.min_chars

    @property
    def no_results(self) -> bool:
        """Query long enough, search done, nothing found."""
        return self.has_min_chars and not self.searching and not self.results and self.error is None

    def update_query(self, query: str) -> None:
        """
        Record a keystroke. Must be called from a running event loop.

        Args:
            query: Full current contents of the search box
        """
        self.query = query
        self._cancel_pending()

        if not self.has_min_chars:
            self.results = []
            self.error = None
            return

        self._task = asyncio.get_running_loop().create_task(self._run(query.strip()))

    async def _run(self, query: str) -> None:
        await asyncio.sleep(self.debounce_seconds)

        self.searching = True
        self.error = None
        try:
            self.results = await self._search_fn(query)
            logger.debug(f"Client search '{query}' returned {len(self.results)} result(s)")
        except Exception as e:
            logger.warning(f"Client search '{query}' failed: {e}")
            self.results = []
            self.error = e.user_message if isinstance(e, BookingError) else SEARCH_ERROR_MESSAGE
        finally:
            self.searching = False

    async def wait(self) -> None:
        """Wait for the scheduled search, if any, to settle."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.searching = False

    def reset(self) -> None:
        """Clear query and results, cancelling any pending search."""
        self._cancel_pending()
        self.query = ""
        self.results = []
        self.error = None
