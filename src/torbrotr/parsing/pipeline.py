"""
Whole-document parse pipelines.

[parse()][torbrotr.parsing.pipeline.parse] tokenizes a source and decodes
each chunk into an [ObjectStore][torbrotr.models.store.ObjectStore] in one
pass. [parse_async()][torbrotr.parsing.pipeline.parse_async] runs the same
work as two asyncio tasks joined by a FIFO queue: one producer tokenizing
and one consumer decoding. Both are all-or-nothing: any
[DocumentError][torbrotr.core.exceptions.DocumentError] aborts the parse
and no partial store is returned.

Examples:
    ```python
    with open("2014-12-08-07-00-00-consensus", "rb") as fd:
        annotation = parse_annotation(fd.readline())
        store = parse(fd, annotation, lazy=True)

    for entry in store.iterate(flt):
        print(entry)
    ```
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from torbrotr.core.config import ParserConfig
from torbrotr.core.exceptions import FieldDecodeError
from torbrotr.core.logger import Logger
from torbrotr.models.annotation import Annotation
from torbrotr.models.lazy import LazyRecord
from torbrotr.models.store import ObjectStore

from .meta import ConsensusMeta, parse_meta_info
from .registry import DecoderRegistry, DocumentFormat, get_registry
from .tokenizer import AsyncReadable, Readable, RecordTokenizer, atokenize, tokenize


_LOGGER_NAME = "torbrotr.parser"


@dataclass(frozen=True, slots=True)
class _Options:
    document_format: DocumentFormat
    strict: bool
    lazy: bool
    memoize: bool
    read_size: int
    queue_size: int
    json_logs: bool


def _resolve_options(
    document_type: str | Annotation,
    *,
    strict: bool | None,
    lazy: bool | None,
    config: ParserConfig | None,
    registry: DecoderRegistry | None,
) -> _Options:
    config = config or ParserConfig()
    document_format = (registry or get_registry()).decoder_for(document_type)

    if strict is None:
        strict = config.strict
    if strict is None:
        strict = document_format.strict_default

    return _Options(
        document_format=document_format,
        strict=strict,
        lazy=config.lazy if lazy is None else lazy,
        memoize=config.memoize,
        read_size=config.read_size,
        queue_size=config.queue_size,
        json_logs=config.json_logs,
    )


def _make_handle(chunk: str, options: _Options, logger: Logger) -> LazyRecord[Any]:
    """Wrap *chunk* in a handle, decoding it right away unless the parse is lazy."""
    try:
        handle: LazyRecord[Any] = LazyRecord(
            chunk, options.document_format, memoize=options.memoize or not options.lazy
        )
        if not options.lazy:
            handle.resolve()
    except FieldDecodeError as e:
        logger.error("chunk_decode_failed", keyword=e.keyword, error=str(e), chunk=chunk)
        raise
    return handle


def _finish(
    store: ObjectStore[Any], tokenizer: RecordTokenizer, options: _Options, logger: Logger
) -> ObjectStore[Any]:
    preamble = tokenizer.preamble
    if preamble:
        logger.debug("preamble_skipped", length=len(preamble))

    if options.document_format.parses_meta:
        store.meta_info = parse_meta_info(preamble)
        if store.meta_info:
            try:
                ConsensusMeta.from_meta_info(store.meta_info)
            except FieldDecodeError as e:
                if options.strict:
                    raise
                logger.warning("meta_info_invalid", keyword=e.keyword, error=str(e))

    logger.info(
        "document_parsed",
        records=len(store),
        lazy=options.lazy,
        strict=options.strict,
    )
    return store


def parse(
    source: Readable,
    document_type: str | Annotation,
    *,
    strict: bool | None = None,
    lazy: bool | None = None,
    config: ParserConfig | None = None,
    registry: DecoderRegistry | None = None,
) -> ObjectStore[Any]:
    """Parse a whole document from *source* into a store.

    Args:
        source: Object with ``read(size)`` returning ``str`` or UTF-8 ``bytes``,
            positioned after the ``@type`` annotation (a leading annotation
            line is tolerated and ends up in the preamble).
        document_type: Type name or parsed annotation selecting the format.
        strict: Require the terminal marker. ``None`` defers to *config*,
            then to the format's default.
        lazy: Defer record decoding until first access. ``None`` defers to
            *config*.
        config: Pipeline settings; defaults to ``ParserConfig()``.
        registry: Format registry; defaults to the process-wide one.

    Returns:
        Store keyed by normalized fingerprint; duplicates keep the last record.

    Raises:
        UnknownDocumentTypeError: If no format matches *document_type*.
        BoundaryError: If record boundaries cannot be found.
        FieldDecodeError: If an eager decode, an identity line or (in strict
            mode) the consensus header is invalid.
    """
    options = _resolve_options(
        document_type, strict=strict, lazy=lazy, config=config, registry=registry
    )
    logger = Logger(
        _LOGGER_NAME,
        json_output=options.json_logs,
        context={"type": options.document_format.type_name},
    )
    tokenizer = RecordTokenizer(options.document_format.boundary)
    store: ObjectStore[Any] = ObjectStore()

    for chunk in tokenize(
        source,
        options.document_format.boundary,
        read_size=options.read_size,
        strict=options.strict,
        tokenizer=tokenizer,
    ):
        store.put_handle(_make_handle(chunk, options, logger))

    return _finish(store, tokenizer, options, logger)


# ---------------------------------------------------------------------------
# Async pipeline
# ---------------------------------------------------------------------------


class _EndOfDocument:
    """Queue sentinel: the producer finished cleanly."""


@dataclass(frozen=True, slots=True)
class _Failure:
    """Queue sentinel: the producer failed with *error*."""

    error: Exception


_END = _EndOfDocument()


async def _produce(
    source: Readable | AsyncReadable,
    tokenizer: RecordTokenizer,
    options: _Options,
    queue: asyncio.Queue[str | _EndOfDocument | _Failure],
) -> None:
    try:
        async for chunk in atokenize(
            source,
            options.document_format.boundary,
            read_size=options.read_size,
            strict=options.strict,
            tokenizer=tokenizer,
        ):
            await queue.put(chunk)
    except Exception as e:
        await queue.put(_Failure(e))
        return
    await queue.put(_END)


async def parse_async(
    source: Readable | AsyncReadable,
    document_type: str | Annotation,
    *,
    strict: bool | None = None,
    lazy: bool | None = None,
    config: ParserConfig | None = None,
    registry: DecoderRegistry | None = None,
) -> ObjectStore[Any]:
    """Asynchronous [parse()][torbrotr.parsing.pipeline.parse].

    A producer task tokenizes *source* (whose ``read`` may be a coroutine)
    into a FIFO queue bounded by ``config.queue_size``; the calling task
    decodes chunks in arrival order. A producer failure is delivered in
    band and raised as soon as the consumer reaches it; queued chunks
    behind it are not processed.
    """
    options = _resolve_options(
        document_type, strict=strict, lazy=lazy, config=config, registry=registry
    )
    logger = Logger(
        _LOGGER_NAME,
        json_output=options.json_logs,
        context={"type": options.document_format.type_name},
    )
    tokenizer = RecordTokenizer(options.document_format.boundary)
    store: ObjectStore[Any] = ObjectStore()
    queue: asyncio.Queue[str | _EndOfDocument | _Failure] = asyncio.Queue(
        maxsize=options.queue_size
    )

    producer = asyncio.create_task(_produce(source, tokenizer, options, queue))
    try:
        while True:
            item = await queue.get()
            if isinstance(item, _Failure):
                raise item.error
            if isinstance(item, _EndOfDocument):
                break
            store.put_handle(_make_handle(item, options, logger))
    finally:
        if not producer.done():
            producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)

    return _finish(store, tokenizer, options, logger)
