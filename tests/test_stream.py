"""Tests for the streamed response decoder."""

import asyncio
import json
from collections.abc import AsyncIterator

import pytest

from codeassist.api.errors import StreamDecodeError
from codeassist.api.stream import decode_stream


async def _lines(*lines: str) -> AsyncIterator[str]:
    for line in lines:
        yield line


async def _collect(lines: AsyncIterator[str], signal: asyncio.Event | None = None):
    return [message async for message in decode_stream(lines, signal)]


class TestFraming:
    """Tests for blank-line delimited framing."""

    async def test_single_data_line(self):
        messages = await _collect(_lines('data: {"a": 1}', ""))
        assert messages == [{"a": 1}]

    async def test_one_message_per_block(self):
        messages = await _collect(
            _lines('data: {"n": 1}', "", 'data: {"n": 2}', "", "data: [3]", "")
        )
        assert messages == [{"n": 1}, {"n": 2}, [3]]

    async def test_multi_fragment_join(self):
        messages = await _collect(_lines('data: {"a":1,', 'data: "b":2}', ""))
        assert messages == [{"a": 1, "b": 2}]

    async def test_fragments_joined_with_newlines(self):
        fragments = ["[", '"x",', '"y"', "]"]
        lines = [f"data: {fragment}" for fragment in fragments] + [""]
        messages = await _collect(_lines(*lines))
        assert messages == [json.loads("\n".join(fragments))]

    async def test_fragments_are_trimmed(self):
        messages = await _collect(_lines('data:    {"a": 1}   ', ""))
        assert messages == [{"a": 1}]

    async def test_blank_line_without_data_is_noop(self):
        messages = await _collect(_lines("", "", "data: 1", "", "", ""))
        assert messages == [1]

    async def test_only_blank_lines(self):
        assert await _collect(_lines("", "", "")) == []

    async def test_empty_stream(self):
        assert await _collect(_lines()) == []

    async def test_undelimited_trailing_data_is_discarded(self):
        messages = await _collect(_lines("data: 1", "", 'data: {"partial": true}'))
        assert messages == [1]


class TestProtocolViolations:
    """Tests for malformed lines."""

    async def test_unprefixed_line_raises(self):
        received = []
        with pytest.raises(StreamDecodeError) as exc_info:
            async for message in decode_stream(
                _lines("data: 1", "", "oops", "data: 2", "")
            ):
                received.append(message)

        assert received == [1]
        assert exc_info.value.line == "oops"
        assert "oops" in str(exc_info.value)

    async def test_prefix_without_space_is_a_violation(self):
        with pytest.raises(StreamDecodeError, match="data:1"):
            await _collect(_lines("data:1", ""))

    async def test_event_field_is_a_violation(self):
        with pytest.raises(StreamDecodeError):
            await _collect(_lines("event: message", "data: 1", ""))

    async def test_violation_inside_block_drops_block(self):
        received = []
        with pytest.raises(StreamDecodeError):
            async for message in decode_stream(_lines("data: {", ": comment", "")):
                received.append(message)
        assert received == []

    async def test_invalid_json_raises_with_cause(self):
        with pytest.raises(StreamDecodeError) as exc_info:
            await _collect(_lines("data: {not json", ""))
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


class TestLaziness:
    """Tests that decoding is incremental."""

    async def test_yields_before_stream_is_consumed(self):
        pulled = 0

        async def source() -> AsyncIterator[str]:
            nonlocal pulled
            for line in ("data: 1", "", "data: 2", ""):
                pulled += 1
                yield line

        stream = decode_stream(source())
        first = await anext(stream)

        assert first == 1
        assert pulled == 2
        await stream.aclose()


class TestCancellation:
    """Tests for cooperative cancellation."""

    async def test_no_message_after_signal(self):
        signal = asyncio.Event()
        received = []
        async for message in decode_stream(
            _lines("data: 1", "", "data: 2", "", "data: 3", ""), signal
        ):
            received.append(message)
            signal.set()

        assert received == [1]

    async def test_signal_before_start_yields_nothing(self):
        signal = asyncio.Event()
        signal.set()
        assert await _collect(_lines("data: 1", ""), signal) == []

    async def test_signal_while_accumulating_drops_message(self):
        signal = asyncio.Event()

        async def source() -> AsyncIterator[str]:
            yield "data: 1"
            yield ""
            yield "data: 2"
            signal.set()
            yield ""

        assert await _collect(source(), signal) == [1]

    async def test_unset_signal_has_no_effect(self):
        signal = asyncio.Event()
        messages = await _collect(_lines("data: 1", "", "data: 2", ""), signal)
        assert messages == [1, 2]

    async def test_signal_while_waiting_for_next_line(self):
        signal = asyncio.Event()
        source_cancelled = asyncio.Event()

        async def source() -> AsyncIterator[str]:
            yield "data: 1"
            yield ""
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                source_cancelled.set()
                raise
            yield "data: 2"
            yield ""

        stream = decode_stream(source(), signal)
        assert await anext(stream) == 1

        asyncio.get_running_loop().call_later(0.01, signal.set)
        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(anext(stream), 2)
        assert source_cancelled.is_set()
