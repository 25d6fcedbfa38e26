"""Tests for the response multiplexer."""
from unittest.mock import AsyncMock, Mock

import pytest

from ipfspy.core.add.multiplexer import ResponseMultiplexer
from ipfspy.core.api.errors import IpfsAPIError
from ipfspy.core.exceptions import DecodeError


async def records(*items):
    for item in items:
        yield item


async def demux(multiplexer, *items):
    return [result async for result in multiplexer.demux(records(*items))]


class TestResponseMultiplexer:
    """Test suite for ResponseMultiplexer."""

    @pytest.mark.asyncio
    async def test_results_without_progress(self):
        """Test every record is a result when no callback is set."""
        results = await demux(
            ResponseMultiplexer(),
            {'Name': 'a', 'Hash': 'bafyA', 'Size': '3'},
            {'Name': 'b', 'Hash': 'bafyB', 'Size': '4'},
        )

        assert [(r.path, r.cid, r.size) for r in results] == [('a', 'bafyA', 3), ('b', 'bafyB', 4)]

    @pytest.mark.asyncio
    async def test_progress_records_go_to_callback(self):
        """Test progress and results never overlap."""
        progress = Mock()
        multiplexer = ResponseMultiplexer(progress)

        results = await demux(
            multiplexer,
            {'Name': 'a', 'Bytes': 100},
            {'Name': 'a', 'Bytes': 200},
            {'Name': 'a', 'Hash': 'bafyA', 'Size': '200'},
        )

        assert [call.args[0] for call in progress.call_args_list] == [100, 200]
        assert len(results) == 1
        assert results[0].cid == 'bafyA'
        assert multiplexer.progress_events == 2
        assert multiplexer.results == 1

    @pytest.mark.asyncio
    async def test_async_callback_awaited(self):
        """Test coroutine callbacks are awaited."""
        progress = AsyncMock()

        await demux(ResponseMultiplexer(progress), {'Bytes': 7})

        progress.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_progress_records_are_results_without_callback(self):
        """Test records with bytes are results when nobody listens."""
        results = await demux(ResponseMultiplexer(), {'Name': 'a', 'Bytes': 1})

        assert len(results) == 1
        assert results[0].bytes == 1

    @pytest.mark.asyncio
    async def test_error_record(self):
        """Test error records raise."""
        with pytest.raises(IpfsAPIError) as exc_info:
            await demux(
                ResponseMultiplexer(),
                {'Message': 'file too large', 'Code': 0, 'Type': 'error'},
            )

        assert exc_info.value.message == 'file too large'
        assert exc_info.value.code == 0

    @pytest.mark.asyncio
    async def test_non_object_record(self):
        """Test non-object records are rejected."""
        with pytest.raises(DecodeError):
            await demux(ResponseMultiplexer(), ['not', 'an', 'object'])

    @pytest.mark.asyncio
    async def test_keys_normalised(self):
        """Test raw records are snake_case."""
        results = await demux(
            ResponseMultiplexer(),
            {'Name': 'a', 'Hash': 'bafyA', 'Size': '1', 'CidVersion': 1},
        )

        assert results[0].raw['cid_version'] == 1
