"""
User-facing logging and progress reporting.

Two small capabilities are injected at construction time:

- Reporter: ``info(message)`` / ``error(message)``
- ProgressSink: ``create(message) -> handle`` where ``handle.remove()``
  clears the status line

Each has a plain implementation (``logging``, or nothing at all) and a
terminal implementation built on click. RunContext owns the counters and
the current progress handle for one run and is passed to every stage.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import click

MESSAGE_PREFIX = "Provisioned Concurrency: "


@runtime_checkable
class Reporter(Protocol):
    """Fire-and-forget message sink."""

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@runtime_checkable
class ProgressHandle(Protocol):
    def remove(self) -> None: ...


@runtime_checkable
class ProgressSink(Protocol):
    """Renders a single ephemeral status line."""

    def create(self, message: str) -> ProgressHandle: ...


class LoggingReporter:
    """Reporter that forwards to a ``logging.Logger``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("pc_reconciler")

    def info(self, message: str) -> None:
        self.logger.info("%s%s", MESSAGE_PREFIX, message)

    def error(self, message: str) -> None:
        self.logger.error("%s%s", MESSAGE_PREFIX, message)


class ClickReporter:
    """
    Reporter that writes to the terminal; errors go to stderr in red.

    Given the run's ClickProgress, the status line is cleared while a
    message is written and drawn again below it.
    """

    def __init__(self, progress: ClickProgress | None = None) -> None:
        self.progress = progress

    def _hidden_progress(self) -> contextlib.AbstractContextManager[None]:
        if self.progress is None:
            return contextlib.nullcontext()
        return self.progress.suspended()

    def info(self, message: str) -> None:
        with self._hidden_progress():
            click.echo(f"{MESSAGE_PREFIX}{message}")

    def error(self, message: str) -> None:
        with self._hidden_progress():
            click.secho(f"{MESSAGE_PREFIX}{message}", fg="red", err=True)


class _NoopHandle:
    def remove(self) -> None:
        pass


class NullProgress:
    """Progress sink that renders nothing."""

    def create(self, message: str) -> ProgressHandle:
        return _NoopHandle()


class _LineHandle:
    def __init__(self, sink: ClickProgress, message: str) -> None:
        self.sink = sink
        self.message = message
        self._removed = False

    def remove(self) -> None:
        if self._removed:
            return
        self._removed = True
        self.sink._release(self)


def _erase_line() -> None:
    # carriage return + erase line
    click.echo("\r\x1b[2K", nl=False, err=True)


class ClickProgress:
    """Progress sink that redraws one status line on stderr."""

    def __init__(self, enabled: bool | None = None) -> None:
        if enabled is None:
            enabled = click.get_text_stream("stderr").isatty()
        self.enabled = enabled
        self._current: _LineHandle | None = None

    def create(self, message: str) -> ProgressHandle:
        if not self.enabled:
            return _NoopHandle()
        handle = _LineHandle(self, message)
        self._current = handle
        click.echo(f"\r{message}", nl=False, err=True)
        return handle

    def _release(self, handle: _LineHandle) -> None:
        if handle is self._current:
            self._current = None
            _erase_line()

    @contextlib.contextmanager
    def suspended(self) -> Iterator[None]:
        """Clear the status line while other output is written, then redraw it."""
        current = self._current
        if current is not None:
            _erase_line()
        try:
            yield
        finally:
            if current is not None and current is self._current:
                click.echo(f"\r{current.message}", nl=False, err=True)


@dataclass
class RunContext:
    """
    Progress state for one run, owned by the scheduler.

    The progress line is replaced (old handle removed, new one created)
    on every update rather than mutated in place.
    """

    progress: ProgressSink
    total: int
    title: str = "Setting provisioned concurrency"
    completed: int = 0
    started_at: float = field(default_factory=time.monotonic)
    handle: ProgressHandle | None = None

    def __post_init__(self) -> None:
        if self.handle is None:
            self.handle = self.progress.create(self.message())

    @property
    def elapsed_seconds(self) -> int:
        return int(time.monotonic() - self.started_at)

    def message(self) -> str:
        return f"{self.title} ({self.completed}/{self.total}) ({self.elapsed_seconds}s)"

    def refresh(self, suffix: str | None = None) -> None:
        """Redraw the status line, optionally with a trailing detail."""
        if self.handle is None:
            return
        self.handle.remove()
        message = self.message()
        if suffix:
            message = f"{message} - {suffix}"
        self.handle = self.progress.create(message)

    def mark_completed(self) -> tuple[int, int, int]:
        """
        Count one finished task (success or failure) and redraw.

        Returns:
            (completed, total, elapsed_seconds)
        """
        self.completed += 1
        self.refresh()
        return self.completed, self.total, self.elapsed_seconds

    def close(self) -> None:
        """Remove the status line. Safe to call more than once."""
        if self.handle is not None:
            self.handle.remove()
            self.handle = None

    async def tick(self, interval: float) -> None:
        """Redraw every ``interval`` seconds until cancelled or closed."""
        while self.handle is not None:
            await asyncio.sleep(interval)
            self.refresh()
