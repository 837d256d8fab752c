"""Connection to the compositor and the callback loop."""

from __future__ import annotations

import itertools
import os
import socket
import struct
import threading
from typing import Callable, Optional, Union

from .messages import (
    CallCallback,
    Message,
    OutputArgs,
    Request,
    RequestResponse,
    SpawnArgs,
    decode_incoming,
    encode_message,
)

SOCKET_ENV_VAR = "PINNACLE_SOCKET"
DEFAULT_SOCKET_PATH = "/tmp/pinnacle_socket"

_LENGTH = struct.Struct("=I")
_U32_MODULUS = 2**32

CallbackArgs = Optional[Union[SpawnArgs, OutputArgs]]
Callback = Callable[[CallbackArgs, "CallbackVec"], None]


class CallbackVec:
    """Holds every callback registered with the compositor.

    A callback's id is its position in :attr:`callbacks`. Each callback is
    called with the arguments the compositor sent and this collection, so
    callbacks can register further callbacks.
    """

    def __init__(self) -> None:
        self.callbacks: list[Callback] = []

    def add(self, callback: Callback) -> int:
        """Store ``callback`` and return its id."""
        self.callbacks.append(callback)
        return len(self.callbacks) - 1

    def __len__(self) -> int:
        return len(self.callbacks)


class Client:
    """A framed MessagePack connection to the compositor.

    Each frame is a native-endian 32-bit length followed by the payload.
    """

    def __init__(self, stream: socket.socket) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self._request_ids = itertools.count()
        self._unread_callbacks: dict[int, CallCallback] = {}
        self._unread_responses: dict[int, RequestResponse] = {}

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, msg: Message) -> None:
        """Send one message to the compositor."""
        payload = encode_message(msg)
        with self._lock:
            self._stream.sendall(_LENGTH.pack(len(payload)) + payload)

    def _recv_exact(self, size: int) -> bytes:
        chunks = bytearray()
        while len(chunks) < size:
            chunk = self._stream.recv(size - len(chunks))
            if not chunk:
                raise ConnectionError("connection to the compositor was closed")
            chunks += chunk
        return bytes(chunks)

    def _read_frame(self) -> CallCallback | RequestResponse:
        with self._lock:
            (length,) = _LENGTH.unpack(self._recv_exact(_LENGTH.size))
            payload = self._recv_exact(length)
        return decode_incoming(payload)

    def read_message(self, request_id: int | None = None) -> CallCallback | RequestResponse:
        """Read the next message, or the response to ``request_id`` if given.

        While waiting for a response, other messages are kept to be
        handled later.
        """
        while True:
            if request_id is not None and request_id in self._unread_responses:
                return self._unread_responses.pop(request_id)
            incoming = self._read_frame()
            if request_id is None:
                return incoming
            if isinstance(incoming, CallCallback):
                self._unread_callbacks[incoming.callback_id] = incoming
            elif incoming.request_id != request_id:
                self._unread_responses[incoming.request_id] = incoming
            else:
                return incoming

    def request(self, request: Request) -> RequestResponse:
        """Send a request and wait for its response."""
        request_id = next(self._request_ids) % _U32_MODULUS
        self.send(Message("Request", {"request_id": request_id, "request": request}))
        response = self.read_message(request_id)
        assert isinstance(response, RequestResponse)
        return response

    def _dispatch(self, msg: CallCallback, callbacks: CallbackVec) -> None:
        callback = callbacks.callbacks[msg.callback_id]
        callback(msg.args, callbacks)

    def listen(self, callbacks: CallbackVec) -> None:
        """Run callbacks as the compositor asks for them.

        Returns only by raising, for instance when the connection closes.
        """
        while True:
            while self._unread_callbacks:
                callback_id = next(iter(self._unread_callbacks))
                self._dispatch(self._unread_callbacks.pop(callback_id), callbacks)
            incoming = self.read_message()
            if not isinstance(incoming, CallCallback):
                raise RuntimeError(
                    f"unexpected response to request {incoming.request_id} while listening"
                )
            self._dispatch(incoming, callbacks)

    def close(self) -> None:
        self._stream.close()


_client: Client | None = None


def connect(path: str | os.PathLike[str] | None = None) -> Client:
    """Connect to the compositor's socket and make it the current client.

    Without ``path``, ``$PINNACLE_SOCKET`` is used, falling back to
    ``/tmp/pinnacle_socket``.
    """
    global _client
    if _client is not None:
        raise RuntimeError("already connected to the compositor")
    if path is None:
        path = os.environ.get(SOCKET_ENV_VAR, DEFAULT_SOCKET_PATH)
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(os.fspath(path))
    except OSError:
        sock.close()
        raise
    _client = Client(sock)
    return _client


def install(client: Client | None) -> None:
    """Make ``client`` the current client, or clear it with ``None``."""
    global _client
    _client = client


def get_client() -> Client:
    """The current client."""
    if _client is None:
        raise RuntimeError("not connected to the compositor; call connect() first")
    return _client


def send_msg(msg: Message) -> None:
    get_client().send(msg)


def request(req: Request) -> RequestResponse:
    return get_client().request(req)


def listen(callbacks: CallbackVec) -> None:
    """Listen for callback calls; call this at the very end of a configuration."""
    get_client().listen(callbacks)


def quit() -> None:
    """Quit the compositor."""
    send_msg(Message("Quit"))