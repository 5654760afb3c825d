"""
Structured logging with key=value and JSON output support.

Wraps the standard library ``logging`` module so that parser events carry
their context (document type, record counts, markers) as structured fields
instead of being interpolated into free text. Two output formats exist:
human-readable key=value pairs (default) and one JSON object per line.

Values containing spaces, equals signs, or quotes are escaped and wrapped in
double quotes. Long values (raw record chunks, for instance) are truncated to
a configurable maximum length.

``StructuredFormatter`` reads the ``structured_kv`` extra attached by
[Logger][torbrotr.core.logger.Logger] and renders ``level name message k=v``.
[configure_logging()][torbrotr.core.logger.configure_logging] installs it on
the root handler, which also unifies plain ``logging.getLogger()`` output
from the models layer.

Examples:
    ```python
    from torbrotr.core.logger import Logger

    logger = Logger("parser")
    logger.info("document_parsed", type="network-status-consensus-3", records=6840)
    # Output: info parser document_parsed type=network-status-consensus-3 records=6840
    ```
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import Any, ClassVar


_TRUNCATION_SUFFIX = "...<truncated {} chars>"


def _truncate(value: str, max_value_length: int | None) -> str:
    if max_value_length and len(value) > max_value_length:
        return value[:max_value_length] + _TRUNCATION_SUFFIX.format(len(value) - max_value_length)
    return value


def format_kv_pairs(
    kwargs: dict[str, Any],
    max_value_length: int | None = 1000,
    prefix: str = " ",
) -> str:
    """Format a dictionary as space-separated key=value pairs.

    Args:
        kwargs: Key-value pairs to format.
        max_value_length: Maximum characters per value before truncation.
            Pass None to disable truncation.
        prefix: String prepended to the output (default: single space).

    Returns:
        Formatted string, e.g. ``' records=12 marker="r "'``, or an empty
        string if *kwargs* is empty.
    """
    if not kwargs:
        return ""

    parts = []
    for k, v in kwargs.items():
        s = _truncate(str(v), max_value_length)
        if not s or any(c in s for c in " =\"'\n"):
            escaped = s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
            parts.append(f'{k}="{escaped}"')
        else:
            parts.append(f"{k}={s}")

    return prefix + " ".join(parts)


class StructuredFormatter(logging.Formatter):
    """Formats log records as ``level name message k=v ...``.

    Records without a ``structured_kv`` extra (plain ``logging`` calls) are
    emitted with the same prefix and no pairs.
    """

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname.lower()} {record.name} {record.getMessage()}"
        extra: dict[str, Any] = getattr(record, "structured_kv", {})
        if extra:
            base += format_kv_pairs(extra)
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


class Logger:
    """Structured logger that appends keyword arguments as extra fields.

    All public methods mirror the standard logging API with an added
    ``**kwargs`` parameter. Context bound with
    [bind()][torbrotr.core.logger.Logger.bind] is merged into every call.

    Examples:
        ```python
        logger = Logger("parser").bind(type="server-descriptor")
        logger.debug("chunk_decoded", fingerprint="DA4DEC93...")
        ```
    """

    _DEFAULT_MAX_VALUE_LENGTH: ClassVar[int] = 1000

    def __init__(
        self,
        name: str,
        *,
        json_output: bool = False,
        max_value_length: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize a structured logger.

        Args:
            name: Logger name; maps to ``logging.getLogger(name)``.
            json_output: If True, emit JSON objects instead of key=value pairs.
            max_value_length: Maximum character length for individual values
                before truncation. Defaults to 1000.
            context: Fields attached to every message.
        """
        if max_value_length is None:
            max_value_length = self._DEFAULT_MAX_VALUE_LENGTH
        self._logger = logging.getLogger(name)
        self._json_output = json_output
        self._max_value_length = max_value_length
        self._context: dict[str, Any] = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **context: Any) -> Logger:
        """Return a logger sharing this one's settings with extra bound fields."""
        return Logger(
            self._logger.name,
            json_output=self._json_output,
            max_value_length=self._max_value_length,
            context={**self._context, **context},
        )

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _format_json(self, msg: str, level: str, kwargs: dict[str, Any]) -> str:
        record = {
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            "level": level,
            "logger": self._logger.name,
            "message": msg,
            **kwargs,
        }
        return json.dumps(record, default=str)

    def _make_extra(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        if not kwargs:
            return {}
        truncated: dict[str, Any] = {}
        for k, v in kwargs.items():
            s = str(v)
            truncated[k] = (
                _truncate(s, self._max_value_length)
                if self._max_value_length and len(s) > self._max_value_length
                else v
            )
        return {"structured_kv": truncated}

    def _log(
        self, level: int, msg: str, kwargs: dict[str, Any], *, exc_info: bool = False
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        fields = {**self._context, **kwargs}
        if self._json_output:
            level_name = logging.getLevelName(level).lower()
            self._logger.log(level, self._format_json(msg, level_name, fields), exc_info=exc_info)
        else:
            self._logger.log(level, msg, extra=self._make_extra(fields), exc_info=exc_info)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a DEBUG level message with optional key=value pairs."""
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an INFO level message with optional key=value pairs."""
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a WARNING level message with optional key=value pairs."""
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with optional key=value pairs."""
        self._log(logging.ERROR, msg, kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        """Log a CRITICAL level message with optional key=value pairs."""
        self._log(logging.CRITICAL, msg, kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an ERROR level message with the active traceback attached."""
        self._log(logging.ERROR, msg, kwargs, exc_info=True)


def configure_logging(level: str = "INFO", *, json_output: bool = False) -> logging.Handler:
    """Configure the root logger with structured formatting.

    Installs a single stream handler using
    [StructuredFormatter][torbrotr.core.logger.StructuredFormatter] (or a
    bare ``%(message)s`` formatter when *json_output* is set, since
    [Logger][torbrotr.core.logger.Logger] already serialises the record).
    Calling it again replaces the handler installed by the previous call.

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(message)s") if json_output else StructuredFormatter()
    )
    handler.set_name("torbrotr")

    for existing in list(logging.root.handlers):
        if existing.get_name() == "torbrotr":
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper()))
    return handler
