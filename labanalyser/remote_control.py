"""A TCP server that lets other programs read and set data entries.

Every frame starts with a 15 byte header, all integers little endian:
the frame length (4 bytes, header included), a 3 letter command, the
length of the identifier including its terminating NUL (4 bytes) and the
payload length (4 bytes). The identifier and the payload follow.
"""

from __future__ import annotations

import asyncio
import struct
from collections.abc import Callable, MutableMapping
from contextlib import suppress
from dataclasses import dataclass

from labanalyser.interface_data import InterfaceData

HEADER_SIZE = 15
DEFAULT_PORT = 4080

_HEADER = struct.Struct("<I3sII")
_U32 = struct.Struct("<I")
_DOUBLE = struct.Struct("<d")

MessageSender = Callable[[str, str, InterfaceData], None]


@dataclass(frozen=True)
class Request:
    """One command received from a client."""

    command: str
    id: str
    payload: bytes = b""


def encode_request(command: str, id: str, payload: bytes = b"") -> bytes:
    """Build the frame a client sends for ``command`` on ``id``."""
    command_bytes = command.encode("latin-1")
    if len(command_bytes) != 3:
        raise ValueError("a command has exactly three letters")
    id_bytes = id.encode("latin-1") + b"\0"
    size = HEADER_SIZE + len(id_bytes) + len(payload)
    return _HEADER.pack(size, command_bytes, len(id_bytes), len(payload)) + id_bytes + payload


class FrameBuffer:
    """Collects received bytes and splits them into requests."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, data: bytes) -> list[Request]:
        """Add ``data`` and return every request now complete.

        Raises ValueError for a frame whose header cannot be right.
        """
        self._buffer += data
        requests = []
        while len(self._buffer) >= 4:
            (size,) = _U32.unpack_from(self._buffer)
            if size < HEADER_SIZE:
                raise ValueError(f"frame length {size} is shorter than the header")
            if len(self._buffer) < size:
                break
            frame = bytes(self._buffer[:size])
            del self._buffer[:size]
            requests.append(_decode(frame))
        return requests


def _decode(frame: bytes) -> Request:
    _, command, id_length, _ = _HEADER.unpack_from(frame)
    if id_length < 1 or HEADER_SIZE + id_length > len(frame):
        raise ValueError(f"identifier length {id_length} does not fit the frame")
    id_end = HEADER_SIZE + id_length
    return Request(
        command=command.decode("latin-1"),
        id=frame[HEADER_SIZE : id_end - 1].decode("latin-1"),
        payload=frame[id_end:],
    )


def apply_set(data: InterfaceData, payload: bytes) -> InterfaceData:
    """Return a copy of ``data`` updated from a ``set`` payload.

    Numbers arrive as one double and keep the kind held; text arrives NUL
    terminated. A selection only changes to one of its options.
    """
    updated = data.copy()
    if updated.is_numeric():
        if len(payload) < _DOUBLE.size:
            raise ValueError("a numeric value needs eight bytes")
        (number,) = _DOUBLE.unpack_from(payload)
        updated.set_keep_type(number)
    elif updated.is_string():
        updated.set_text(payload[:-1].decode("latin-1"))
    elif updated.is_gui_selection():
        text = payload[:-1].decode("latin-1")
        if text in updated.value.options:
            updated.set_keep_type(text)
    return updated


def encode_get_response(data: InterfaceData | None) -> bytes:
    """Build the reply to a ``get``; None stands for an unknown identifier.

    The reply is a flag byte (1 for text), the element count and the
    elements. Kinds without a wire form reply with the flag byte alone.
    """
    if data is None:
        return b"\0" + _U32.pack(0)
    if data.is_numeric():
        return b"\0" + _U32.pack(1) + _DOUBLE.pack(data.as_float())
    if data.is_string():
        return b"\1" + _encode_text(data.as_text())
    if data.is_gui_selection():
        return b"\1" + _encode_text(data.value.selected)
    if data.is_data_pair():
        pair = data.value
        if pair.first is None:
            return b"\0" + _U32.pack(0)
        times = list(pair.first)
        values = list(pair.second or [])
        samples = times + values
        return b"\0" + _U32.pack(len(samples)) + struct.pack(f"<{len(samples)}d", *samples)
    return b"\0"


def _encode_text(text: str) -> bytes:
    raw = text.encode("utf-8").split(b"\0", 1)[0]
    elements = len(raw) + 1
    return _U32.pack(elements) + (raw + b"\0").ljust(elements * 8, b"\0")


class RemoteControlServer:
    """Serves ``get`` and ``set`` requests for the entries in ``container``.

    Updates from ``set`` go to ``message_sender``; without one they are
    stored back into the container.
    """

    def __init__(
        self,
        container: MutableMapping[str, InterfaceData],
        message_sender: MessageSender | None = None,
        host: str = "127.0.0.1",
        first_port: int = DEFAULT_PORT,
    ) -> None:
        self.container = container
        self._message_sender = message_sender
        self._host = host
        self._first_port = first_port
        self._server: asyncio.base_events.Server | None = None
        self._port: int | None = None

    @property
    def port(self) -> int | None:
        """The port listened on, None while stopped."""
        return self._port

    def handle(self, request: Request) -> bytes | None:
        """Carry out ``request``; return the reply bytes for a ``get``."""
        if request.command == "set":
            current = self.container.get(request.id)
            if current is not None:
                updated = apply_set(current, request.payload)
                if self._message_sender is None:
                    self.container[request.id] = updated
                else:
                    self._message_sender(request.command, request.id, updated)
            return None
        if request.command == "get":
            return encode_get_response(self.container.get(request.id))
        return None

    async def start(self) -> int:
        """Listen on the first free port from ``first_port`` upward and return it."""
        port = self._first_port
        while True:
            try:
                self._server = await asyncio.start_server(self._serve, self._host, port)
            except OSError:
                if port == 0 or port >= 65535:
                    raise
                port += 1
            else:
                break
        self._port = self._server.sockets[0].getsockname()[1]
        return self._port

    async def stop(self) -> None:
        """Stop listening."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
            self._port = None

    async def _serve(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        frames = FrameBuffer()
        try:
            while chunk := await reader.read(65536):
                for request in frames.feed(chunk):
                    reply = self.handle(request)
                    if reply is not None:
                        writer.write(reply)
                await writer.drain()
        except (ValueError, ConnectionError):
            pass
        finally:
            writer.close()
            with suppress(ConnectionError):
                await writer.wait_closed()