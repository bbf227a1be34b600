"""Logging through logfire, fanned out to configurable sinks.

Modules import the ``logger`` proxy. It does nothing until
``setup_logger()`` installs a configured Logger, which happens when
Config finishes validating.

Sinks:
- console: logfire's own console output on stderr
- file: text (or JSON) lines written through an OpenTelemetry
  span processor
- logfire: the logfire.dev cloud service
"""

from __future__ import annotations

import contextlib
import os
import sys
from abc import abstractmethod
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import logfire
from opentelemetry.proto.logs.v1 import logs_pb2
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
    SpanExportResult,
)
from pydantic import Field, PrivateAttr, model_validator

from coursegit.core.base import BaseConfig

# Level name -> OpenTelemetry severity number, most verbose first
LEVELS = {
    "trace": logs_pb2.SEVERITY_NUMBER_TRACE,
    "debug": logs_pb2.SEVERITY_NUMBER_DEBUG,
    "info": logs_pb2.SEVERITY_NUMBER_INFO,
    "warn": logs_pb2.SEVERITY_NUMBER_WARN,
    "error": logs_pb2.SEVERITY_NUMBER_ERROR,
    "fatal": logs_pb2.SEVERITY_NUMBER_FATAL,
}

LEVEL_HELP = "Valid: " + ", ".join(LEVELS)


def severity(level: str | None) -> int:
    """Severity number for a level name; unknown names mean info."""
    return LEVELS.get((level or "info").lower(), LEVELS["info"])


def level_name(number: int) -> str:
    """Most severe level name whose threshold ``number`` reaches."""
    for name, threshold in reversed(LEVELS.items()):
        if number >= threshold:
            return name
    return "unknown"


def _span_level(span: ReadableSpan) -> int:
    attrs = span.attributes or {}
    return attrs.get("logfire.level_num", LEVELS["info"])


_current_logger: Logger | None = None


class _LoggerProxy:
    """Stand-in for the Logger installed by setup_logger()."""

    def __getattr__(self, name):
        if _current_logger is not None:
            return getattr(_current_logger, name)
        if name == "span":
            return lambda *args, **kwargs: contextlib.nullcontext()
        return lambda *args, **kwargs: None

    def __enter__(self):
        if _current_logger is None:
            return self
        return _current_logger.__enter__()

    def __exit__(self, *args):
        if _current_logger is None:
            return False
        return _current_logger.__exit__(*args)


logger = _LoggerProxy()


class LevelFilteringExporter(SpanExporter):
    """Wraps an exporter, dropping spans below ``min_level``."""

    def __init__(self, exporter: SpanExporter, min_level: str | None):
        self._exporter = exporter
        self._min_severity = severity(min_level)

    def export(self, spans: list[ReadableSpan]) -> SpanExportResult:
        kept = [s for s in spans if _span_level(s) >= self._min_severity]
        if not kept:
            return SpanExportResult.SUCCESS
        return self._exporter.export(kept)

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)


# Attributes already shown by the template, or logfire bookkeeping
_HIDDEN_ATTRIBUTES = {
    "code.filepath", "code.lineno", "code.function",
    "logfire.msg", "logfire.level_num", "logfire.span_type",
    "logfire.msg_template", "logfire.json_schema",
}
_HIDDEN_PREFIXES = ("otel.", "telemetry.", "service.", "process.")


class LineFormatter:
    """Render a span as one line of text from a ``str.format`` template.

    Template fields: timestamp, level, message, filepath, lineno,
    location, function. Caller attributes such as the git command or
    exit code are appended after a bar.
    """

    def __init__(self, template: str, escape: bool = False):
        self.template = template
        self.escape = escape

    def fields(self, span: ReadableSpan) -> dict:
        attrs = span.attributes or {}
        filepath = attrs.get("code.filepath", "")
        lineno = attrs.get("code.lineno", "")
        message = attrs.get("logfire.msg", span.name)
        if self.escape:
            message = (
                message.replace("\\", "\\\\")
                .replace("\n", "\\n")
                .replace("\r", "\\r")
                .replace("\t", "\\t")
            )
        return {
            "timestamp": datetime.fromtimestamp(
                span.start_time / 1e9, tz=UTC
            ),
            "level": level_name(_span_level(span)),
            "message": message,
            "filepath": filepath,
            "lineno": lineno,
            "location": f"{filepath}:{lineno}" if filepath else "",
            "function": attrs.get("code.function", ""),
        }

    def __call__(self, span: ReadableSpan) -> str:
        try:
            line = self.template.format(**self.fields(span))
        except KeyError as e:
            return f"ERROR: Invalid template field {e}\n"

        extra = sorted(
            (key, value)
            for key, value in (span.attributes or {}).items()
            if key not in _HIDDEN_ATTRIBUTES
            and not key.startswith(_HIDDEN_PREFIXES)
        )
        if extra:
            line += " │ " + " ".join(f"{k}={v!r}" for k, v in extra)
        return line + "\n"


class Sink(BaseConfig):
    """One log destination; closed with the Logger that owns it."""

    enabled: bool = Field(default=True, description="Enable this sink")
    level: str | None = Field(
        default=None,
        description=(
            "Minimum level for this sink (default: the logger level). "
            + LEVEL_HELP
        ),
    )
    escape_special_characters: bool = Field(
        default=False,
        description="Escape newlines and tabs so each entry is one line",
    )
    format_template: str | None = Field(
        default=None,
        description="Line template; JSON lines when unset",
    )

    _processor: Any = PrivateAttr(default=None)

    def formatter(self):
        if not self.format_template:
            return lambda span: span.to_json() + os.linesep
        return LineFormatter(
            self.format_template, self.escape_special_characters
        )

    @abstractmethod
    def create_processor(self, log_root: Path):
        """Span processor feeding this sink, or None when logfire
        drives the sink itself."""

    def close(self):
        if self._processor:
            with contextlib.suppress(Exception):
                self._processor.shutdown()


class ConsoleSink(Sink):
    """Diagnostics on stderr, rendered by logfire."""

    verbose: bool = Field(
        default=False,
        description="Include level and source location",
    )
    colors: str = Field(
        default="auto",
        description="Color mode: auto, always, never",
    )

    def create_processor(self, log_root: Path):
        return None

    def options(self):
        if not self.enabled:
            return False
        return logfire.ConsoleOptions(
            min_log_level=self.level,
            verbose=self.verbose,
            colors=self.colors,
            include_timestamps=False,
            show_project_link=False,
            output=sys.stderr,
        )


class FileSink(Sink):
    """Append log lines to a file under the log root."""

    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(
        default="{log_root}/coursegit.log",
        description="Log file path; {log_root} is expanded",
    )
    format_template: str | None = Field(
        default="{timestamp:%Y-%m-%d %H:%M:%S} {level:<5} {message}",
        description="Line template; JSON lines when unset",
    )

    _file: Any = PrivateAttr(default=None)

    def resolved_path(self, log_root: Path) -> Path:
        return Path(self.path.format(log_root=log_root))

    def create_processor(self, log_root: Path):
        log_path = self.resolved_path(log_root)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Line buffered; closed in close()
        self._file = open(log_path, "a", buffering=1, encoding="utf-8")  # noqa: SIM115

        exporter = ConsoleSpanExporter(
            out=self._file, formatter=self.formatter()
        )
        return BatchSpanProcessor(
            LevelFilteringExporter(exporter, self.level)
        )

    def close(self):
        # Shut the processor down first so queued spans reach the file
        super().close()
        if self._file and not self._file.closed:
            with contextlib.suppress(OSError):
                self._file.close()


class LogfireSink(Sink):
    """Send spans to logfire.dev."""

    enabled: bool = Field(
        default=False,
        description="Send telemetry to logfire.dev",
    )
    token: str | None = Field(
        default=None,
        description="Write token (or set LOGFIRE_TOKEN)",
    )

    def create_processor(self, log_root: Path):
        return None


class Logger(BaseConfig):
    """The configured logger: a default level plus three sinks."""

    level: str = Field(
        default="warn",
        description="Default level for sinks without one. " + LEVEL_HELP,
    )
    console: ConsoleSink = Field(default_factory=ConsoleSink)
    file: FileSink = Field(default_factory=FileSink)
    logfire: LogfireSink = Field(default_factory=LogfireSink)

    @model_validator(mode="after")
    def _inherit_level(self) -> Logger:
        for sink in (self.console, self.file):
            if sink.level is None:
                sink.level = self.level
        return self

    def sinks(self) -> list[Sink]:
        return [self.console, self.file, self.logfire]

    def setup(self, log_root: Path):
        """Open the enabled sinks and point logfire at them."""
        processors = []
        for sink in self.sinks():
            if not sink.enabled:
                continue
            sink._processor = sink.create_processor(log_root)
            if sink._processor is not None:
                processors.append(sink._processor)

        logfire.configure(
            service_name="coursegit",
            send_to_logfire=self.logfire.enabled,
            token=self.logfire.token if self.logfire.enabled else None,
            console=self.console.options(),
            additional_span_processors=processors or None,
            metrics=False,
            inspect_arguments=False,
        )

    def _emit(self, level: str, msg: str, **kwargs):
        getattr(logfire, level)(msg, **kwargs)

    def trace(self, msg: str, **kwargs):
        self._emit("trace", msg, **kwargs)

    def debug(self, msg: str, **kwargs):
        self._emit("debug", msg, **kwargs)

    def info(self, msg: str, **kwargs):
        self._emit("info", msg, **kwargs)

    def warn(self, msg: str, **kwargs):
        self._emit("warn", msg, **kwargs)

    warning = warn

    def error(self, msg: str, **kwargs):
        self._emit("error", msg, **kwargs)

    def span(self, msg: str, **kwargs):
        """Span context manager, e.g.
        ``with logger.span("reset {lesson_id}", lesson_id=lesson_id):``
        """
        return logfire.span(msg, **kwargs)

    def __getattr__(self, name):
        return getattr(logfire, name)


def setup_logger(
    log_root: Path,
    console: ConsoleSink | None = None,
    file: FileSink | None = None,
    logfire: LogfireSink | None = None,
    level: str | None = None,
) -> Logger:
    """Install a Logger built from the given sinks as ``logger``.

    Config calls this once loaded; tests call it for console-only
    output.
    """
    global _current_logger

    options = {} if level is None else {"level": level}
    _current_logger = Logger(
        console=console or ConsoleSink(),
        file=file or FileSink(),
        logfire=logfire or LogfireSink(),
        **options,
    )
    _current_logger.setup(log_root)
    return _current_logger
