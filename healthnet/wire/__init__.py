from .codec import DecodeError, decode, encode, read_snapshot, write_snapshot

__all__ = [
    "DecodeError",
    "decode",
    "encode",
    "read_snapshot",
    "write_snapshot",
]
