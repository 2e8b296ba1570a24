"""Optimistic update protocol: apply locally, confirm remotely, roll back on failure."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..errors import BookingError
from .notifier import Notifier

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")

LOADING_MESSAGE = "Guardando..."
DEFAULT_ERROR_MESSAGE = "Ocurrió un error. Por favor, intenta de nuevo."


class OptimisticUpdater:
    """
    Runs a speculative local change ahead of the network call that makes it
    durable, reverting it if that call fails.

    The updater does not know what to roll back to: callers pass the
    prior-state value explicitly as `previous`, and it is handed back to
    `rollback_fn` unchanged. Overlapping calls are not serialized; callers
    disable the triggering control while `is_loading` is true.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self.error: Optional[Exception] = None
        self._in_flight = 0

    @property
    def is_loading(self) -> bool:
        """Whether any execute call is still waiting on the server."""
        return self._in_flight > 0

    async def execute(
        self,
        optimistic_fn: Callable[[], Any],
        async_fn: Callable[[], Awaitable[T]],
        rollback_fn: Callable[[S], Any],
        previous: S,
        on_success: Optional[Callable[[T], Any]] = None,
        on_error: Optional[Callable[[Exception], Any]] = None,
        success_message: Optional[str] = None,
        error_message: Optional[str] = None,
        show_loading: bool = True,
    ) -> Optional[T]:
        """
        Execute an optimistic update.

        Args:
            optimistic_fn: Applies the speculative change (runs immediately)
            async_fn: Performs the real server operation
            rollback_fn: Restores state; receives `previous`
            previous: Prior state of exactly what optimistic_fn touches
            on_success: Called with the result after success
            on_error: Called with the exception after rollback
            success_message: Success notification text (none if omitted)
            error_message: Error notification text (default message if omitted)
            show_loading: Whether to show a loading indicator while waiting

        Returns:
            The result of async_fn, or None if it failed
        """
        self.error = None
        self._in_flight += 1
        loading_id: Optional[int] = None

        try:
            optimistic_fn()

            if show_loading:
                loading_id = self.notifier.loading(LOADING_MESSAGE)

            result = await async_fn()

        except asyncio.CancelledError:
            rollback_fn(previous)
            self._dismiss_loading(loading_id)
            self._in_flight -= 1
            raise

        except Exception as e:
            rollback_fn(previous)
            self._dismiss_loading(loading_id)
            self.error = e

            if on_error:
                on_error(e)

            description = e.user_message if isinstance(e, BookingError) else None
            self.notifier.error(error_message or DEFAULT_ERROR_MESSAGE, description)

            logger.error(f"Optimistic update failed, rolled back: {e}")
            self._in_flight -= 1
            return None

        self._dismiss_loading(loading_id)
        if on_success:
            on_success(result)
        if success_message:
            self.notifier.success(success_message)

        logger.info(f"Optimistic update succeeded{f': {success_message}' if success_message else ''}")
        self._in_flight -= 1
        return result

    def _dismiss_loading(self, loading_id: Optional[int]) -> None:
        if loading_id is not None:
            self.notifier.dismiss(loading_id)
