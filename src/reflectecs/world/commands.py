"""Deferred, single-shot commands.

A command captures everything it needs (usually a ReflectTarget and a payload)
when created, and runs once against the world when the queue is applied.
Nothing is retained after it runs and there is no cancellation.

Usage:
    world.defer(SetValue(target, 6))
    world.defer(lambda w: w.spawn(Position()))
    outcomes = world.flush()
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from reflectecs.errors import ReflectError

if TYPE_CHECKING:
    from reflectecs.world.world import World

logger = logging.getLogger(__name__)


@runtime_checkable
class Command(Protocol):
    """Unit of deferred work executed under exclusive world access."""

    def apply(self, world: World) -> Any: ...


@dataclass(frozen=True, slots=True)
class FnCommand:
    """Wraps a plain callable taking the world."""

    fn: Callable[[World], Any]

    def apply(self, world: World) -> Any:
        return self.fn(world)


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """What happened to one command during a flush."""

    command: Command
    result: Any = None
    error: ReflectError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CommandQueue:
    """FIFO queue of single-shot commands.

    Each command is removed from the queue before it runs, so it runs at most
    once. Commands queued while applying run in the same pass.
    """

    def __init__(self) -> None:
        self._queue: deque[Command] = deque()

    def push(self, command: Command | Callable[[World], Any]) -> None:
        """Queue a command, wrapping bare callables in FnCommand.

        Raises:
            TypeError: If the argument is neither a Command nor callable.
        """
        if not isinstance(command, Command):
            if not callable(command):
                raise TypeError(f"Expected a Command or callable, got {type(command)}")
            command = FnCommand(command)
        self._queue.append(command)

    def __len__(self) -> int:
        return len(self._queue)

    def clear(self) -> None:
        self._queue.clear()

    def apply(self, world: World) -> list[CommandOutcome]:
        """Run and drain queued commands in order.

        Reflection failures are logged and recorded in the outcome list. Any
        other exception propagates; commands behind it stay queued.

        Returns:
            One CommandOutcome per command that ran.
        """
        outcomes: list[CommandOutcome] = []
        while self._queue:
            command = self._queue.popleft()
            try:
                result = command.apply(world)
            except ReflectError as err:
                logger.warning(f"Deferred command {command!r} failed: {err}")
                outcomes.append(CommandOutcome(command=command, error=err))
                continue
            logger.debug(f"Deferred command {command!r} -> {result!r}")
            outcomes.append(CommandOutcome(command=command, result=result))
        return outcomes
