"""Serial link between two instances over TCP, and selection of a link by spec."""

from __future__ import annotations

import logging
import re
import select
import socket
import time
from dataclasses import dataclass

from dotmatrix.link import LinkHandler, NoLink, SendMode, SerialBus
from dotmatrix.link_pipe import LinkError, PipeLink

log = logging.getLogger(__name__)

_ATOI = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_FAILED = select.POLLERR | select.POLLHUP


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _poll(sock: socket.socket, events: int) -> int:
    poller = select.poll()
    poller.register(sock.fileno(), events)
    result = poller.poll(0)
    return result[0][1] if result else 0


def _close(sock: socket.socket | None) -> None:
    if sock is not None:
        try:
            sock.close()
        except OSError:
            pass


@dataclass(frozen=True)
class LinkAddress:
    """Local listening port and the remote peer to connect to."""

    local_port: int
    remote_host: str
    remote_port: int


def parse_link_address(spec: str) -> LinkAddress:
    """Parse ``local_port:remote_host:remote_port``.

    The local port ends at the first colon and the remote port starts after
    the last one. Ports that are not numbers read as 0. Raises ValueError
    when the spec holds no colon at all.
    """
    first = spec.find(":")
    if first < 0:
        raise ValueError(f"link address needs a colon: {spec!r}")
    last = spec.rfind(":")
    local = spec[:first]
    remote_port = spec[last + 1:]
    remote_host = spec[first + 1:last] if last > first else remote_port
    return LinkAddress(_atoi(local), remote_host, _atoi(remote_port))


class NetworkLink(LinkHandler):
    """Link that listens on a local port and connects to a remote peer."""

    def __init__(
        self,
        spec: str,
        bus: SerialBus,
        *,
        answer_delay: float = 0.025,
        timeout: float | None = None,
    ) -> None:
        super().__init__(bus)
        self.spec = spec
        self.address = parse_link_address(spec)
        self.answer_delay = answer_delay
        self.timeout = timeout
        self._server: socket.socket | None = None
        self._client: socket.socket | None = None
        self._remote: socket.socket | None = None

    def _open_server(self) -> None:
        if self._server is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setblocking(False)
            sock.bind(("", self.address.local_port))
            sock.listen(1)
        except OSError as exc:
            sock.close()
            raise LinkError(f"failed to open local server: {exc}") from exc
        self._server = sock
        log.debug("link: server started on port %d", self.address.local_port)

    def _open_remote(self) -> None:
        if self._remote is not None:
            return
        try:
            sock = socket.create_connection(
                (self.address.remote_host, self.address.remote_port), timeout=self.timeout
            )
        except OSError as exc:
            # Refused connections are expected while the peer is not started.
            log.debug("failed to connect to %s: %s", self.address.remote_host, exc)
            return
        self._remote = sock

    def _try_open(self) -> None:
        self._open_server()
        self._open_remote()

    def init(self) -> None:
        """Start listening and try to reach the peer."""
        self.address = parse_link_address(self.spec)
        self._try_open()

    def _send_mode(self, sock: socket.socket | None, mode: SendMode, value: int) -> None:
        if sock is None:
            self._try_open()
            return
        events = _poll(sock, select.POLLOUT)
        if events & _FAILED:
            self.reset()
            return
        if not events & select.POLLOUT:
            return
        try:
            sock.sendall(bytes([int(mode), value & 0xFF]))
        except OSError:
            self.reset()
            return
        if mode is SendMode.ACTIVE:
            log.debug("sending %d", value & 0xFF)
            try:
                answer = sock.recv(2)
            except OSError:
                answer = b""
            if len(answer) == 2:
                log.debug("reading %d", answer[1])
                self.bus.trigger(answer[1])
            else:
                self.reset()
        else:
            time.sleep(self.answer_delay)
            log.debug("answering %d", value & 0xFF)

    def send(self, value: int) -> None:
        """Send ``value`` to the peer and wait for its byte."""
        self._send_mode(self._remote, SendMode.ACTIVE, value)

    def _accept(self) -> bool:
        server = self._server
        if server is None:
            return True
        events = _poll(server, select.POLLIN)
        if events & _FAILED:
            self.reset()
        elif events & select.POLLIN:
            try:
                client, _ = server.accept()
            except OSError:
                log.debug("link: failed to accept remote connection")
                self.reset()
                return False
            client.setblocking(False)
            _close(self._client)
            self._client = client
            log.debug("link: accepted connection")
            self._open_remote()
        return True

    def recv(self) -> None:
        """Accept a pending peer and answer a byte it sent, if any."""
        if not self._accept():
            return
        client = self._client
        if client is None:
            return
        events = _poll(client, select.POLLIN)
        if events & _FAILED:
            self.reset()
            return
        if not events & select.POLLIN:
            return
        try:
            data = client.recv(2)
        except BlockingIOError:
            return
        except OSError:
            data = b""
        if not data:
            self.reset()
            return
        received = data[1] if len(data) > 1 else 0
        log.debug("received %d", received)
        own = self.bus.trigger(received)
        if data[0] & 1:
            self._send_mode(client, SendMode.PASSIVE, own)

    def shutdown(self) -> None:
        """Close every socket."""
        for sock in (self._server, self._client, self._remote):
            _close(sock)
        self._server = self._client = self._remote = None


def setup_link(spec: str, bus: SerialBus) -> LinkHandler:
    """Build the link named by ``spec``: ``pipe:PATH``, ``network:ADDR`` or empty.

    Raises ValueError for any other spec.
    """
    if spec.startswith("pipe:"):
        log.debug("setting up pipe link")
        return PipeLink(spec[5:], bus)
    if spec.startswith("network:"):
        log.debug("setting up network link")
        return NetworkLink(spec[8:], bus)
    if spec == "":
        log.debug("setting up no link")
        return NoLink(bus)
    raise ValueError(f"unknown link: {spec!r}")