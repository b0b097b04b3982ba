"""Self-describing binary encoding of a SystemInfo snapshot.

A frame is ``b"HNSI"`` + ``u32`` body length + body. The body is one tagged
value; every value starts with a one-byte tag so a reader can walk the
structure without knowing the schema:

    0x01 string   u32 length, UTF-8 bytes
    0x02 float64  8 bytes IEEE-754
    0x03 uint64   8 bytes
    0x04 int64    8 bytes (durations, in nanoseconds)
    0x05 list     u32 count, then ``count`` tagged values
    0x06 struct   u16 field count, then per field a u16-length UTF-8 name
                  followed by a tagged value

All integers are big-endian. A connection carries exactly one frame.
"""

from __future__ import annotations

import asyncio
import struct
from typing import Any

from pydantic import ValidationError

from healthnet.models import StorageInfo, SystemInfo

MAGIC = b"HNSI"
DEFAULT_MAX_SIZE = 1 << 20  # 1 MiB
MAX_DEPTH = 8

TAG_STRING = 0x01
TAG_FLOAT64 = 0x02
TAG_UINT64 = 0x03
TAG_INT64 = 0x04
TAG_LIST = 0x05
TAG_STRUCT = 0x06

_TAG_NAMES = {
    TAG_STRING: "string",
    TAG_FLOAT64: "float64",
    TAG_UINT64: "uint64",
    TAG_INT64: "int64",
    TAG_LIST: "list",
    TAG_STRUCT: "struct",
}

_HEADER = struct.Struct(">4sI")
_TAG = struct.Struct(">B")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_F64 = struct.Struct(">d")
_U64 = struct.Struct(">Q")
_I64 = struct.Struct(">q")

_STORAGE_FIELDS = ("Mountpoint", "Total", "Used", "Free")
_SYSTEM_FIELDS = ("Hostname", "IPAddress", "CPUUsage", "RAMUsage", "Storage", "Uptime")


class DecodeError(ValueError):
    """Raised when bytes are not exactly one well-formed snapshot frame."""


# ── encoding ────────────────────────────────────────


class _Writer:
    def __init__(self) -> None:
        self._buf = bytearray()

    def string(self, value: str) -> None:
        raw = value.encode("utf-8")
        self._buf += _TAG.pack(TAG_STRING) + _U32.pack(len(raw)) + raw

    def float64(self, value: float) -> None:
        self._buf += _TAG.pack(TAG_FLOAT64) + _F64.pack(value)

    def uint64(self, value: int) -> None:
        self._buf += _TAG.pack(TAG_UINT64) + _U64.pack(value)

    def int64(self, value: int) -> None:
        self._buf += _TAG.pack(TAG_INT64) + _I64.pack(value)

    def begin_list(self, count: int) -> None:
        self._buf += _TAG.pack(TAG_LIST) + _U32.pack(count)

    def begin_struct(self, field_count: int) -> None:
        self._buf += _TAG.pack(TAG_STRUCT) + _U16.pack(field_count)

    def field(self, name: str) -> None:
        raw = name.encode("utf-8")
        self._buf += _U16.pack(len(raw)) + raw

    def getvalue(self) -> bytes:
        return bytes(self._buf)


def _encode_storage(w: _Writer, storage: StorageInfo) -> None:
    w.begin_struct(len(_STORAGE_FIELDS))
    w.field("Mountpoint")
    w.string(storage.mountpoint)
    w.field("Total")
    w.uint64(storage.total)
    w.field("Used")
    w.uint64(storage.used)
    w.field("Free")
    w.uint64(storage.free)


def _encode_system(w: _Writer, info: SystemInfo) -> None:
    w.begin_struct(len(_SYSTEM_FIELDS))
    w.field("Hostname")
    w.string(info.hostname)
    w.field("IPAddress")
    w.string(info.ip_address)
    w.field("CPUUsage")
    w.begin_list(len(info.cpu_usage))
    for usage in info.cpu_usage:
        w.float64(usage)
    w.field("RAMUsage")
    w.float64(info.ram_usage)
    w.field("Storage")
    w.begin_list(len(info.storage))
    for storage in info.storage:
        _encode_storage(w, storage)
    w.field("Uptime")
    w.int64(info.uptime_ns)


def encode(info: SystemInfo) -> bytes:
    """Return the complete frame (header + body) for one snapshot."""
    w = _Writer()
    _encode_system(w, info)
    body = w.getvalue()
    return _HEADER.pack(MAGIC, len(body)) + body


async def write_snapshot(writer: asyncio.StreamWriter, info: SystemInfo) -> None:
    writer.write(encode(info))
    await writer.drain()


# ── decoding ────────────────────────────────────────


class _Reader:
    """Walks tagged values out of a body, raising DecodeError on any mismatch."""

    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    def _take(self, n: int) -> memoryview:
        if n > self.remaining:
            raise DecodeError(
                f"truncated at offset {self._pos}: need {n} bytes, {self.remaining} left"
            )
        chunk = self._view[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def _unpack(self, fmt: struct.Struct) -> Any:
        return fmt.unpack(self._take(fmt.size))[0]

    def _text(self, length: int) -> str:
        try:
            return bytes(self._take(length)).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"invalid UTF-8 near offset {self._pos}") from exc

    def value(self, depth: int = 0) -> tuple[int, Any]:
        if depth > MAX_DEPTH:
            raise DecodeError(f"nesting deeper than {MAX_DEPTH}")
        tag = self._unpack(_TAG)

        if tag == TAG_STRING:
            return tag, self._text(self._unpack(_U32))
        if tag == TAG_FLOAT64:
            return tag, self._unpack(_F64)
        if tag == TAG_UINT64:
            return tag, self._unpack(_U64)
        if tag == TAG_INT64:
            return tag, self._unpack(_I64)

        if tag == TAG_LIST:
            count = self._unpack(_U32)
            # every element needs at least its tag byte
            if count > self.remaining:
                raise DecodeError(
                    f"list declares {count} elements but only {self.remaining} bytes remain"
                )
            return tag, [self.value(depth + 1) for _ in range(count)]

        if tag == TAG_STRUCT:
            count = self._unpack(_U16)
            fields: dict[str, tuple[int, Any]] = {}
            for _ in range(count):
                name = self._text(self._unpack(_U16))
                if name in fields:
                    raise DecodeError(f"duplicate field {name!r}")
                fields[name] = self.value(depth + 1)
            return tag, fields

        raise DecodeError(f"unknown tag 0x{tag:02x} at offset {self._pos - 1}")

    def finish(self) -> None:
        if self.remaining:
            raise DecodeError(f"{self.remaining} trailing bytes after snapshot")


def _expect(tagged: tuple[int, Any], tag: int, where: str) -> Any:
    got, value = tagged
    if got != tag:
        raise DecodeError(
            f"{where}: expected {_TAG_NAMES[tag]}, got {_TAG_NAMES.get(got, hex(got))}"
        )
    return value


def _struct_fields(
    tagged: tuple[int, Any], names: tuple[str, ...], where: str
) -> dict[str, tuple[int, Any]]:
    raw = _expect(tagged, TAG_STRUCT, where)
    missing = set(names) - raw.keys()
    unknown = raw.keys() - set(names)
    if missing:
        raise DecodeError(f"{where}: missing field(s) {sorted(missing)}")
    if unknown:
        raise DecodeError(f"{where}: unknown field(s) {sorted(unknown)}")
    return raw


def _decode_storage(tagged: tuple[int, Any]) -> dict[str, Any]:
    raw = _struct_fields(tagged, _STORAGE_FIELDS, "StorageInfo")
    return {
        "mountpoint": _expect(raw["Mountpoint"], TAG_STRING, "StorageInfo.Mountpoint"),
        "total": _expect(raw["Total"], TAG_UINT64, "StorageInfo.Total"),
        "used": _expect(raw["Used"], TAG_UINT64, "StorageInfo.Used"),
        "free": _expect(raw["Free"], TAG_UINT64, "StorageInfo.Free"),
    }


def _decode_body(body: bytes) -> SystemInfo:
    reader = _Reader(body)
    top = reader.value()
    reader.finish()

    raw = _struct_fields(top, _SYSTEM_FIELDS, "SystemInfo")
    values = {
        "hostname": _expect(raw["Hostname"], TAG_STRING, "SystemInfo.Hostname"),
        "ip_address": _expect(raw["IPAddress"], TAG_STRING, "SystemInfo.IPAddress"),
        "cpu_usage": [
            _expect(item, TAG_FLOAT64, "SystemInfo.CPUUsage[]")
            for item in _expect(raw["CPUUsage"], TAG_LIST, "SystemInfo.CPUUsage")
        ],
        "ram_usage": _expect(raw["RAMUsage"], TAG_FLOAT64, "SystemInfo.RAMUsage"),
        "storage": [
            _decode_storage(item)
            for item in _expect(raw["Storage"], TAG_LIST, "SystemInfo.Storage")
        ],
        "uptime_ns": _expect(raw["Uptime"], TAG_INT64, "SystemInfo.Uptime"),
    }
    try:
        return SystemInfo.model_validate(values)
    except ValidationError as exc:
        raise DecodeError(f"snapshot failed validation: {exc.error_count()} error(s)") from exc


def _check_header(magic: bytes, length: int, max_size: int) -> None:
    if magic != MAGIC:
        raise DecodeError(f"bad magic {magic!r}")
    if length > max_size:
        raise DecodeError(f"body of {length} bytes exceeds limit of {max_size}")


def decode(data: bytes, max_size: int = DEFAULT_MAX_SIZE) -> SystemInfo:
    """Decode exactly one frame; any missing or extra byte is an error."""
    if len(data) < _HEADER.size:
        raise DecodeError(f"truncated header: got {len(data)} of {_HEADER.size} bytes")
    magic, length = _HEADER.unpack_from(data)
    _check_header(magic, length, max_size)
    body = data[_HEADER.size:]
    if len(body) != length:
        raise DecodeError(f"header declares {length} body bytes, got {len(body)}")
    return _decode_body(body)


async def read_snapshot(
    reader: asyncio.StreamReader, max_size: int = DEFAULT_MAX_SIZE
) -> SystemInfo:
    """Read one frame from a stream. Short reads raise DecodeError."""
    try:
        header = await reader.readexactly(_HEADER.size)
    except asyncio.IncompleteReadError as exc:
        raise DecodeError(
            f"truncated header: got {len(exc.partial)} of {_HEADER.size} bytes"
        ) from exc
    magic, length = _HEADER.unpack(header)
    _check_header(magic, length, max_size)
    try:
        body = await reader.readexactly(length)
    except asyncio.IncompleteReadError as exc:
        raise DecodeError(
            f"truncated body: got {len(exc.partial)} of {length} bytes"
        ) from exc
    return _decode_body(body)
