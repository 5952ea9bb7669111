"""Serial link port: the shared register pair and link handler interface."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field
from types import TracebackType
from typing import Callable


class SendMode(enum.IntEnum):
    """Whether a transfer starts an exchange or answers one."""

    PASSIVE = 0
    ACTIVE = 1


@dataclass
class SerialBus:
    """Serial data and control registers with the serial interrupt line."""

    sb: int = 0
    sc: int = 0
    interrupts: int = 0
    on_interrupt: Callable[[], None] | None = field(default=None, repr=False)

    def _raise_interrupt(self) -> None:
        self.interrupts += 1
        if self.on_interrupt is not None:
            self.on_interrupt()

    def trigger(self, value: int) -> int:
        """Complete a transfer of ``value`` and return the byte it replaced."""
        old = self.sb
        self.sb = value & 0xFF
        self.sc &= 0x7F
        self._raise_interrupt()
        return old


class LinkHandler(abc.ABC):
    """A transport for serial transfers between two machines."""

    def __init__(self, bus: SerialBus) -> None:
        self.bus = bus

    def init(self) -> None:
        """Open the transport; the base link needs no preparation."""

    @abc.abstractmethod
    def send(self, value: int) -> None:
        """Start a transfer of ``value``."""

    def recv(self) -> None:
        """Service incoming transfers; the base link has none."""

    def shutdown(self) -> None:
        """Close the transport; the base link holds no resources."""

    def reset(self) -> None:
        """Close and reopen the transport."""
        self.shutdown()
        self.init()

    def __enter__(self) -> LinkHandler:
        self.init()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()


class NoLink(LinkHandler):
    """A link with nothing attached: every transfer reads back 0xFF."""

    def send(self, value: int) -> None:
        """Answer immediately as if the line were idle."""
        self.bus.sb = 0xFF
        self.bus._raise_interrupt()