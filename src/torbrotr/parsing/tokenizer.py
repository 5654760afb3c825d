"""
Incremental record tokenizer.

Splits a document into raw record chunks using two markers: the literal
that starts every record and the literal that starts the terminal section
of the document (or, for per-record boundaries, that ends every record).
Both markers only match at the start of a line, so a marker embedded in the
middle of a line never fragments a record.

The tokenizer is push based: [feed()][torbrotr.parsing.tokenizer.RecordTokenizer.feed]
returns the chunks completed by the new data and
[close()][torbrotr.parsing.tokenizer.RecordTokenizer.close] signals end of
input. [tokenize()][torbrotr.parsing.tokenizer.tokenize] drives it from any
object with a ``read(size)`` method.

Examples:
    ```python
    boundary = Boundary("r ", "directory-signature")
    for chunk in tokenize(fd, boundary):
        entry = decode_status_entry(chunk)
    ```
"""

from __future__ import annotations

import asyncio
import codecs
import inspect
from collections.abc import AsyncIterator, Awaitable, Iterator
from dataclasses import dataclass
from typing import Protocol

from torbrotr.core.exceptions import MissingStartMarkerError, UnterminatedRecordError
from torbrotr.core.logger import Logger


DEFAULT_READ_SIZE = 65_536

_logger = Logger("torbrotr.tokenizer")


class Readable(Protocol):
    """Anything that supplies more text (or UTF-8 bytes) and ``""``/``b""`` at end."""

    def read(self, size: int = -1, /) -> str | bytes: ...


class AsyncReadable(Protocol):
    """A source whose ``read(size)`` is awaitable."""

    def read(self, size: int = -1, /) -> Awaitable[str | bytes]: ...


@dataclass(frozen=True, slots=True)
class Boundary:
    """Marker pair delimiting the records of one document family.

    Attributes:
        start_marker: Literal that begins the first line of every record.
        terminal_marker: Literal that begins the line ending the record body.
        per_record: If ``False`` the terminal marker ends the whole document
            and is excluded from the last chunk. If ``True`` it ends every
            record and its line is included in the chunk.
    """

    start_marker: str
    terminal_marker: str
    per_record: bool = False

    def __post_init__(self) -> None:
        if not self.start_marker or not self.terminal_marker:
            raise ValueError("boundary markers must be non-empty")


def _find_anchored(buffer: str, marker: str, offset: int) -> int:
    """Index of *marker* at a line start in *buffer* from *offset*, or ``-1``."""
    if offset == 0 and buffer.startswith(marker):
        return 0
    found = buffer.find("\n" + marker, max(offset - 1, 0))
    return found + 1 if found >= 0 else -1


class RecordTokenizer:
    """Single-pass, forward-only splitter of one document into record chunks.

    Chunks never overlap, never are empty, and concatenated in order they
    reproduce the document between the first start marker and the terminal
    marker. Text before the first record is kept as
    [preamble][torbrotr.parsing.tokenizer.RecordTokenizer.preamble].

    Not safe for concurrent use.
    """

    __slots__ = ("_boundary", "_buffer", "_done", "_in_record", "_preamble", "_scan", "_tail")

    def __init__(self, boundary: Boundary) -> None:
        self._boundary = boundary
        self._buffer = ""
        self._scan = 0
        self._in_record = False
        self._tail = max(len(boundary.start_marker), len(boundary.terminal_marker)) + 1
        self._done = False
        self._preamble: str | None = None

    @property
    def boundary(self) -> Boundary:
        return self._boundary

    @property
    def done(self) -> bool:
        """True once the document terminal marker was seen or input was closed."""
        return self._done

    @property
    def preamble(self) -> str:
        """Text preceding the first record (document header lines)."""
        return self._preamble or ""

    def feed(self, data: str) -> list[str]:
        """Append *data* and return every chunk it completes."""
        if self._done or not data:
            return []
        self._buffer += data
        return self._drain(at_eof=False)

    def close(self) -> list[str]:
        """Signal end of input and return the remaining chunks.

        Raises:
            MissingStartMarkerError: If non-blank input remains that holds no
                record start.
            UnterminatedRecordError: If input ends inside a record. The
                error's ``chunk`` holds that record's text.
        """
        if self._done:
            return []
        try:
            return self._drain(at_eof=True)
        finally:
            self._done = True
            self._buffer = ""

    def _consume(self, end: int) -> str:
        taken, self._buffer = self._buffer[:end], self._buffer[end:]
        self._scan = 0
        return taken

    def _drain(self, *, at_eof: bool) -> list[str]:
        start, terminal = self._boundary.start_marker, self._boundary.terminal_marker
        chunks: list[str] = []

        while not self._done:
            if not self._in_record:
                if not self._enter_record(start, terminal, at_eof):
                    break
                continue

            if self._boundary.per_record:
                chunk = self._next_terminated(terminal, at_eof)
            else:
                chunk = self._next_delimited(start, terminal)
            if chunk is not None:
                chunks.append(chunk)
                continue
            if at_eof:
                raise UnterminatedRecordError(
                    f"input ended before {terminal!r} or the next {start!r}",
                    chunk=self._consume(len(self._buffer)),
                )
            break

        return chunks

    def _enter_record(self, start: str, terminal: str, at_eof: bool) -> bool:
        begin = _find_anchored(self._buffer, start, self._scan)
        end = -1
        if not self._boundary.per_record:
            end = _find_anchored(self._buffer, terminal, self._scan)

        if end >= 0 and (begin < 0 or end < begin):
            # a terminal section with no record before it: empty document
            self._set_preamble(self._consume(end))
            self._finish()
            return False
        if begin >= 0:
            self._set_preamble(self._consume(begin))
            self._in_record = True
            return True
        if not at_eof:
            self._scan = max(len(self._buffer) - self._tail, 0)
            return False
        remainder = self._consume(len(self._buffer))
        self._set_preamble(remainder)
        if remainder.strip():
            raise MissingStartMarkerError(
                f"cannot find the beginning of a record: {start!r} at a line start"
            )
        self._finish()
        return False

    def _next_delimited(self, start: str, terminal: str) -> str | None:
        offset = max(self._scan, 1)
        following = _find_anchored(self._buffer, start, offset)
        end = _find_anchored(self._buffer, terminal, offset)
        if end >= 0 and (following < 0 or end < following):
            chunk = self._consume(end)
            self._finish()
            return chunk
        if following >= 0:
            return self._consume(following)
        self._scan = max(len(self._buffer) - self._tail, 1)
        return None

    def _next_terminated(self, terminal: str, at_eof: bool) -> str | None:
        end = _find_anchored(self._buffer, terminal, max(self._scan, 1))
        if end < 0:
            self._scan = max(len(self._buffer) - self._tail, 1)
            return None
        line_end = self._buffer.find("\n", end)
        if line_end < 0:
            if not at_eof:
                self._scan = end
                return None
            line_end = len(self._buffer) - 1
        self._in_record = False
        return self._consume(line_end + 1)

    def _set_preamble(self, text: str) -> None:
        if self._preamble is None:
            self._preamble = text

    def _finish(self) -> None:
        self._done = True
        self._buffer = ""
        self._scan = 0


class _TextDecoder:
    """Turns ``str`` or UTF-8 ``bytes`` reads into text."""

    __slots__ = ("_decoder",)

    def __init__(self) -> None:
        self._decoder: codecs.IncrementalDecoder | None = None

    def __call__(self, data: str | bytes) -> str:
        if isinstance(data, str):
            return data
        if self._decoder is None:
            self._decoder = codecs.getincrementaldecoder("utf-8")()
        return self._decoder.decode(data, final=not data)


def close_tokenizer(tokenizer: RecordTokenizer, *, strict: bool) -> list[str]:
    """Close *tokenizer*; in non-strict mode end of input is an implicit terminal.

    Raises:
        MissingStartMarkerError: If the input held no record start.
        UnterminatedRecordError: In strict mode, if input ended inside a record.
    """
    try:
        return tokenizer.close()
    except UnterminatedRecordError as e:
        if strict:
            raise
        _logger.warning(
            "implicit_terminal",
            marker=tokenizer.boundary.terminal_marker,
            chunk_length=len(e.chunk),
        )
        return [e.chunk]


def tokenize(
    source: Readable,
    boundary: Boundary,
    *,
    read_size: int = DEFAULT_READ_SIZE,
    strict: bool = True,
    tokenizer: RecordTokenizer | None = None,
) -> Iterator[str]:
    """Yield the raw record chunks of *source*.

    *source* is read in *read_size* pieces until it returns an empty value
    or the document terminal marker has been seen. ``bytes`` are decoded as
    UTF-8 incrementally, so a multi-byte character split across two reads
    is handled. Read errors propagate unchanged.

    Args:
        source: Object with a ``read(size)`` method.
        boundary: Markers of the document family.
        read_size: Amount requested per ``read`` call.
        strict: If ``False``, input that ends inside a record yields that
            record as the final chunk instead of raising.
        tokenizer: Tokenizer to drive; pass one to inspect its
            ``preamble`` afterwards.

    Raises:
        MissingStartMarkerError: If the input holds no record start.
        UnterminatedRecordError: In strict mode, if input ends inside a record.
    """
    if tokenizer is None:
        tokenizer = RecordTokenizer(boundary)
    to_text = _TextDecoder()

    while not tokenizer.done:
        data = source.read(read_size)
        text = to_text(data)
        if not data:
            break
        yield from tokenizer.feed(text)

    yield from close_tokenizer(tokenizer, strict=strict)


async def atokenize(
    source: Readable | AsyncReadable,
    boundary: Boundary,
    *,
    read_size: int = DEFAULT_READ_SIZE,
    strict: bool = True,
    tokenizer: RecordTokenizer | None = None,
) -> AsyncIterator[str]:
    """Asynchronous [tokenize()][torbrotr.parsing.tokenizer.tokenize].

    ``source.read`` may be a coroutine function (e.g. ``asyncio.StreamReader``)
    or a plain blocking method; blocking reads run in a worker thread so the
    event loop stays free while the source waits.
    """
    if tokenizer is None:
        tokenizer = RecordTokenizer(boundary)
    to_text = _TextDecoder()
    blocking = not inspect.iscoroutinefunction(source.read)

    while not tokenizer.done:
        if blocking:
            data = await asyncio.to_thread(source.read, read_size)
        else:
            data = await source.read(read_size)
        text = to_text(data)
        if not data:
            break
        for chunk in tokenizer.feed(text):
            yield chunk

    for chunk in close_tokenizer(tokenizer, strict=strict):
        yield chunk
