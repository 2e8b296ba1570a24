"""
Tests for debounced client search.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from arnela_booking.booking.search import SEARCH_ERROR_MESSAGE, ClientSearch
from arnela_booking.errors import NetworkError
from arnela_booking.models import ClientSummary


class TestClientSearch:
    """Test debounce, cancellation and error handling"""

    @pytest.mark.asyncio
    async def test_short_query_does_not_search(self, client_ana):
        search_fn = AsyncMock(return_value=[client_ana])
        search = ClientSearch(search_fn, debounce_ms=0)

        search.update_query(" a ")
        await search.wait()

        search_fn.assert_not_awaited()
        assert search.results == []
        assert search.no_results is False

    @pytest.mark.asyncio
    async def test_burst_of_keystrokes_searches_once(self, client_ana):
        search_fn = AsyncMock(return_value=[client_ana])
        search = ClientSearch(search_fn, debounce_ms=50)

        for query in ["an", "ana", "ana g"]:
            search.update_query(query)
            await asyncio.sleep(0)
        await search.wait()

        search_fn.assert_awaited_once_with("ana g")
        assert search.results == [client_ana]
        assert search.searching is False

    @pytest.mark.asyncio
    async def test_new_keystroke_cancels_in_flight_search(self, client_ana):
        release = asyncio.Event()
        calls = []

        async def search_fn(query):
            calls.append(query)
            if query == "an":
                await release.wait()
                return []
            return [client_ana]

        search = ClientSearch(search_fn, debounce_ms=0)
        search.update_query("an")
        await asyncio.sleep(0.01)
        assert search.searching is True

        search.update_query("ana")
        release.set()
        await search.wait()

        assert calls == ["an", "ana"]
        assert search.results == [client_ana]

    @pytest.mark.asyncio
    async def test_error_clears_results(self, client_ana):
        search_fn = AsyncMock(return_value=[client_ana])
        search = ClientSearch(search_fn, debounce_ms=0)
        search.update_query("ana")
        await search.wait()
        assert search.results == [client_ana]

        search_fn.side_effect = NetworkError()
        search.update_query("anax")
        await search.wait()

        assert search.results == []
        assert search.error == NetworkError().user_message
        assert search.no_results is False

    @pytest.mark.asyncio
    async def test_no_results_after_empty_search(self):
        search = ClientSearch(AsyncMock(return_value=[]), debounce_ms=0)
        search.update_query("zz")
        await search.wait()

        assert search.no_results is True

    @pytest.mark.asyncio
    async def test_reset_cancels_pending(self, client_ana):
        search_fn = AsyncMock(return_value=[client_ana])
        search = ClientSearch(search_fn, debounce_ms=50)

        search.update_query("ana")
        search.reset()
        await asyncio.sleep(0.08)

        search_fn.assert_not_awaited()
        assert search.query == ""

    @pytest.mark.asyncio
    async def test_malformed_response_sets_error(self):
        async def search_fn(query):
            return [ClientSummary(**{"firstName": "Sin id"})]

        search = ClientSearch(search_fn, debounce_ms=0)
        search.update_query("sin")
        await search.wait()

        assert search.results == []
        assert search.error == SEARCH_ERROR_MESSAGE
        assert search.searching is False
