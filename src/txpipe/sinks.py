"""
Line sinks - where the pipeline reports progress.

The pipeline depends only on ``LineSink.record``.  Pick a concrete sink
at the edge: stdlib logging for services, click echo for the CLI, a list
for tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol, Union, runtime_checkable

import click


@runtime_checkable
class LineSink(Protocol):
    def record(self, line: str) -> None:
        ...


class NullSink:
    def record(self, line: str) -> None:
        pass


@dataclass
class ListSink:
    lines: list[str] = field(default_factory=list)

    def record(self, line: str) -> None:
        self.lines.append(line)


@dataclass(frozen=True)
class LoggingSink:
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("txpipe"))
    level: int = logging.INFO

    def record(self, line: str) -> None:
        self.logger.log(self.level, line)


@dataclass(frozen=True)
class EchoSink:
    prefix: str = "  "
    err: bool = False

    def record(self, line: str) -> None:
        click.echo(f"{self.prefix}{line}", err=self.err)


@dataclass(frozen=True)
class CallbackSink:
    callback: Callable[[str], None]

    def record(self, line: str) -> None:
        self.callback(line)


def as_sink(sink: Union[LineSink, Callable[[str], None], None]) -> LineSink:
    """Accept a sink, a plain ``f(line)`` callable, or None."""
    if sink is None:
        return NullSink()
    if isinstance(sink, LineSink):
        return sink
    if callable(sink):
        return CallbackSink(sink)
    raise TypeError(f"Not a line sink: {sink!r}")
