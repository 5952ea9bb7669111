"""Serial link between two local instances over a pair of named pipes."""

from __future__ import annotations

import logging
import os
import select
import time

from dotmatrix.link import LinkHandler, SendMode, SerialBus

log = logging.getLogger(__name__)

FIFO_PERMISSIONS = 0o777


class LinkError(Exception):
    """The link could not be set up or stopped answering."""


def pipe_paths(prefix: str) -> tuple[str, str]:
    """Return the default (output, input) pipe paths for ``prefix``."""
    return prefix + "_a", prefix + "_b"


def _poll(fd: int, events: int) -> int:
    poller = select.poll()
    poller.register(fd, events)
    result = poller.poll(0)
    return result[0][1] if result else 0


def _close(fd: int | None) -> None:
    if fd is not None:
        try:
            os.close(fd)
        except OSError:
            pass


class PipeLink(LinkHandler):
    """Link through two FIFOs; the first instance creates ``_b``, the second ``_a``."""

    def __init__(
        self,
        prefix: str,
        bus: SerialBus,
        *,
        answer_delay: float = 0.025,
        poll_interval: float = 0.001,
        answer_timeout: float | None = None,
    ) -> None:
        super().__init__(bus)
        self.prefix = prefix
        self.out_path, self.in_path = pipe_paths(prefix)
        self.answer_delay = answer_delay
        self.poll_interval = poll_interval
        self.answer_timeout = answer_timeout
        self._in_fd: int | None = None
        self._out_fd: int | None = None

    def init(self) -> None:
        """Choose pipe roles, create the input pipe and open it."""
        out_path, in_path = pipe_paths(self.prefix)
        directory = os.path.dirname(out_path) or os.getcwd()
        if not os.path.isdir(directory):
            raise LinkError("failed to create pipe, directory does not exist")
        if not os.access(directory, os.W_OK):
            raise LinkError("failed to create pipe, directory not writable")
        if os.path.exists(in_path):
            out_path, in_path = in_path, out_path
        if os.path.exists(in_path):
            raise LinkError("failed to create pipe, file exists")
        self.out_path, self.in_path = out_path, in_path
        log.debug("in: %s out: %s", in_path, out_path)
        os.mkfifo(in_path, FIFO_PERMISSIONS)
        self._in_fd = os.open(in_path, os.O_RDONLY | os.O_NONBLOCK)
        self._out_fd = None

    def _try_open(self) -> None:
        if self._out_fd is None and os.path.exists(self.out_path):
            try:
                self._out_fd = os.open(self.out_path, os.O_WRONLY | os.O_NONBLOCK)
                log.debug("opened output %s", self.out_path)
            except OSError:
                self._out_fd = None

    def reset(self) -> None:
        """Drop the output end and reopen the input end."""
        _close(self._out_fd)
        self._out_fd = None
        if self._in_fd is not None:
            _close(self._in_fd)
            self._in_fd = None
            if os.path.exists(self.in_path):
                self._in_fd = os.open(self.in_path, os.O_RDONLY | os.O_NONBLOCK)

    def _read(self) -> int | None:
        if self._in_fd is None:
            return None
        try:
            data = os.read(self._in_fd, 1)
        except BlockingIOError:
            return None
        except OSError:
            self.reset()
            log.warning("link input failed")
            return None
        return data[0] if data else None

    def ready(self) -> bool:
        """True when a byte is waiting on the input pipe."""
        self._try_open()
        if self._in_fd is None:
            return False
        events = _poll(self._in_fd, select.POLLIN)
        if events & (select.POLLERR | select.POLLHUP):
            self.reset()
        return bool(events & select.POLLIN)

    def _send_mode(self, mode: SendMode, value: int) -> None:
        self._try_open()
        if self._out_fd is None:
            return
        events = _poll(self._out_fd, select.POLLOUT)
        if events & (select.POLLERR | select.POLLHUP):
            self.reset()
            return
        if not events & select.POLLOUT:
            return
        try:
            os.write(self._out_fd, bytes([value & 0xFF]))
        except OSError:
            self.reset()
            return
        if mode is SendMode.ACTIVE:
            log.debug("sending %d to %s", value, self.out_path)
            deadline = (
                None if self.answer_timeout is None else time.monotonic() + self.answer_timeout
            )
            while (answer := self._read()) is None:
                if deadline is not None and time.monotonic() > deadline:
                    raise LinkError("no answer from the other side")
                time.sleep(self.poll_interval)
            log.debug("reading %d", answer)
            self.bus.trigger(answer)
        else:
            time.sleep(self.answer_delay)
            log.debug("answering %d to %s", value, self.out_path)

    def send(self, value: int) -> None:
        """Send ``value`` and wait for the other side's byte."""
        self._send_mode(SendMode.ACTIVE, value)

    def recv(self) -> None:
        """Answer a byte sent by the other side, if one is waiting."""
        if not self.ready():
            return
        value = self._read()
        if value is not None:
            log.debug("reading %d", value)
            own = self.bus.trigger(value)
            self._send_mode(SendMode.PASSIVE, own)

    def shutdown(self) -> None:
        """Close both pipes and remove the input pipe."""
        _close(self._in_fd)
        _close(self._out_fd)
        self._in_fd = None
        self._out_fd = None
        try:
            os.remove(self.in_path)
        except OSError:
            pass