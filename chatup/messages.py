"""Wire messages exchanged between chat hosts and the server.

A message is a fixed-size header followed by a body. Values are appended
to the end of the body and read back from the end, so a body behaves like
a stack: the last value written is the first one read.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

HEADER_FORMAT = "<I4xQ"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

_UINT32 = struct.Struct("<I")
_UINT32_MAX = 0xFFFFFFFF
_TEXT_ENCODING = "utf-8"


class MessageError(ValueError):
    """Raised when a message cannot be built or read."""


class MessageID(IntEnum):
    """Kind of a message, carried in its header."""

    CONNECTION_ESTABLISHED = 0
    SERVER_DATA = 1
    HOST_CONNECTION = 2
    HOST_DISCONNECTED = 3
    CHAT_MESSAGE = 4
    NOTIFICATION = 5


def decode_header(data: bytes) -> tuple[MessageID, int]:
    """Return the message id and body size encoded in a raw header."""
    if len(data) != HEADER_SIZE:
        raise MessageError(
            f"header must be {HEADER_SIZE} bytes, got {len(data)}"
        )
    raw_id, size = struct.unpack(HEADER_FORMAT, data)
    try:
        return MessageID(raw_id), size
    except ValueError as exc:
        raise MessageError(f"unknown message id {raw_id}") from exc


@dataclass
class Message:
    """A message header id together with its byte body."""

    id: MessageID = MessageID.CONNECTION_ESTABLISHED
    body: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        self.id = MessageID(self.id)
        self.body = bytearray(self.body)

    @property
    def size(self) -> int:
        """Body size, as written into the header."""
        return len(self.body)

    def add_uint32(self, value: int) -> None:
        """Append an unsigned 32-bit integer to the body."""
        if not 0 <= value <= _UINT32_MAX:
            raise MessageError(f"{value} does not fit in 32 unsigned bits")
        self.body += _UINT32.pack(value)

    def add_buffer(self, data: bytes) -> None:
        """Append raw bytes followed by their length as a 32-bit integer."""
        data = bytes(data)
        if len(data) > _UINT32_MAX:
            raise MessageError("buffer too large")
        self.body += data
        self.add_uint32(len(data))

    def retrieve_uint32(self) -> int:
        """Remove and return the 32-bit integer at the end of the body."""
        if len(self.body) < _UINT32.size:
            raise MessageError("body too short for a 32-bit integer")
        (value,) = _UINT32.unpack_from(self.body, len(self.body) - _UINT32.size)
        del self.body[-_UINT32.size:]
        return value

    def retrieve_buffer(self, size: int) -> bytes:
        """Remove and return the last ``size`` bytes of the body."""
        if size < 0 or size > len(self.body):
            raise MessageError(
                f"cannot take {size} bytes from a body of {len(self.body)}"
            )
        if size == 0:
            return b""
        data = bytes(self.body[-size:])
        del self.body[-size:]
        return data

    def cleanup(self) -> None:
        """Empty the body."""
        self.body.clear()

    def header_bytes(self) -> bytes:
        """Encode the header: message id and current body size."""
        return struct.pack(HEADER_FORMAT, self.id, len(self.body))


def _add_string(msg: Message, text: str) -> None:
    msg.add_buffer(text.encode(_TEXT_ENCODING) + b"\0")


def _retrieve_string(msg: Message) -> str:
    size = msg.retrieve_uint32()
    raw = msg.retrieve_buffer(size)
    if raw.endswith(b"\0"):
        raw = raw[:-1]
    return raw.decode(_TEXT_ENCODING, errors="replace")


@dataclass
class ChatMessage:
    """A line of chat written by a user."""

    text: str = ""
    username: str = ""
    host_id: int = 0

    def serialize_into(self, msg: Message) -> None:
        msg.id = MessageID.CHAT_MESSAGE
        msg.add_uint32(self.host_id)
        _add_string(msg, self.text)
        _add_string(msg, self.username)

    @classmethod
    def deserialize_from(cls, msg: Message) -> ChatMessage:
        username = _retrieve_string(msg)
        text = _retrieve_string(msg)
        host_id = msg.retrieve_uint32()
        return cls(text=text, username=username, host_id=host_id)


@dataclass
class HostConnection:
    """Announces a host that is present in the chat."""

    username: str = ""
    host_id: int = 0

    def serialize_into(self, msg: Message) -> None:
        msg.id = MessageID.HOST_CONNECTION
        msg.add_uint32(self.host_id)
        _add_string(msg, self.username)

    @classmethod
    def deserialize_from(cls, msg: Message) -> HostConnection:
        username = _retrieve_string(msg)
        host_id = msg.retrieve_uint32()
        return cls(username=username, host_id=host_id)


@dataclass
class ConnectionEstablished:
    """Sent by a client right after connecting, carrying its user name."""

    username: str = ""

    def serialize_into(self, msg: Message) -> None:
        msg.id = MessageID.CONNECTION_ESTABLISHED
        _add_string(msg, self.username)

    @classmethod
    def deserialize_from(cls, msg: Message) -> ConnectionEstablished:
        return cls(username=_retrieve_string(msg))


@dataclass
class ServerData:
    """Sent by the server to a new host, telling it its host id."""

    host_id: int = 0

    def serialize_into(self, msg: Message) -> None:
        msg.id = MessageID.SERVER_DATA
        msg.add_uint32(self.host_id)

    @classmethod
    def deserialize_from(cls, msg: Message) -> ServerData:
        return cls(host_id=msg.retrieve_uint32())


@dataclass
class HostDisconnected:
    """Announces that a host left the chat."""

    host_id: int = 0

    def serialize_into(self, msg: Message) -> None:
        msg.id = MessageID.HOST_DISCONNECTED
        msg.add_uint32(self.host_id)

    @classmethod
    def deserialize_from(cls, msg: Message) -> HostDisconnected:
        return cls(host_id=msg.retrieve_uint32())