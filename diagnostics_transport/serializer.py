"""Batch serializer — JSON encoding with gzip compression."""

import gzip
import json

from diagnostics_transport.models import NormalizedItem


def serialize_batch(items: list[NormalizedItem]) -> bytes:
    """Encode a batch as a UTF-8 JSON array of wire dicts."""
    return json.dumps([item.to_dict() for item in items], default=str).encode("utf-8")


def compress_payload(data: bytes) -> bytes:
    return gzip.compress(data)


def decompress_payload(data: bytes) -> bytes:
    return gzip.decompress(data)


def deserialize_batch(data: bytes) -> list[dict]:
    """Decode a gzip or plain JSON body back into a list of wire dicts.

    Gzip data is detected by its magic bytes (0x1f 0x8b); anything else is
    treated as plain UTF-8 JSON.
    """
    if data[:2] == b"\x1f\x8b":
        data = decompress_payload(data)
    return json.loads(data)
