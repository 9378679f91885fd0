"""Decoder for the line-oriented streaming response format.

Streamed responses (``alt=sse``) are a minimal subset of server-sent events::

    data: {"response": {...
    data: ...}}

    data: {"response": {...}}

Each ``data: `` line carries one fragment of a JSON message; consecutive
fragments are joined with newlines and parsed when a blank line closes the
block. Any other non-blank line is a protocol error.

Fragments still buffered when the stream ends without a closing blank line
are discarded, not flushed: an unterminated block is treated as incomplete.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, AsyncIterable, AsyncIterator
from typing import Any

from codeassist.api.errors import StreamDecodeError

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "

# Returned by _next_line in place of a line
_END = object()
_CANCELLED = object()


def _parse_block(fragments: list[str]) -> Any:
    text = "\n".join(fragments)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise StreamDecodeError(
            f"Invalid JSON in streamed message: {e}", line=text
        ) from e


async def _pull(lines: AsyncIterator[str]) -> str | object:
    try:
        return await anext(lines)
    except StopAsyncIteration:
        return _END


async def _next_line(
    lines: AsyncIterator[str], signal: asyncio.Event | None
) -> str | object:
    """Wait for the next line, or ``_CANCELLED`` if the signal fires first."""
    if signal is None:
        return await _pull(lines)

    line_task = asyncio.ensure_future(_pull(lines))
    signal_task = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait(
            {line_task, signal_task}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        line_task.cancel()
        raise
    finally:
        signal_task.cancel()

    if line_task in done:
        return line_task.result()

    line_task.cancel()
    try:
        await line_task
    except asyncio.CancelledError:
        pass
    return _CANCELLED


async def decode_stream(
    lines: AsyncIterable[str],
    signal: asyncio.Event | None = None,
) -> AsyncGenerator[Any, None]:
    """Decode streamed lines into JSON messages, one per delimited block.

    Args:
        lines: Lines of the response body, without line terminators.
        signal: Cancellation signal. Watched while waiting for each line and
            checked before each message is yielded; once set, decoding stops
            without yielding anything further.

    Yields:
        One parsed JSON value per blank-line-delimited block.

    Raises:
        StreamDecodeError: On a line that is neither blank nor prefixed with
            ``data: ``, or on a block that is not valid JSON.
    """
    buffered: list[str] = []
    iterator = aiter(lines)

    while True:
        line = await _next_line(iterator, signal)
        if line is _END:
            break
        if line is _CANCELLED or (signal is not None and signal.is_set()):
            logger.debug("Stream cancelled, dropping %d fragments", len(buffered))
            return

        if line == "":
            if not buffered:
                continue
            message = _parse_block(buffered)
            buffered = []
            yield message
            if signal is not None and signal.is_set():
                return
        elif line.startswith(DATA_PREFIX):
            buffered.append(line[len(DATA_PREFIX) :].strip())
        else:
            raise StreamDecodeError(
                f"Unexpected line format in response: {line}", line=line
            )

    if buffered:
        logger.debug(
            "Stream ended with %d undelimited fragments, discarding", len(buffered)
        )
