"""Content hashing used to seed the synthetic derivations."""

from __future__ import annotations

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
MASK_64 = 0xFFFFFFFFFFFFFFFF


def fnv1a_64(data: bytes) -> int:
    """Return the 64-bit FNV-1a hash of ``data``.

    The hash is only used as a numeric seed, never for identity or security,
    so collisions are harmless.  The implementation is bit-for-bit FNV-1a so
    results stay comparable with existing clients.
    """

    value = FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV_PRIME) & MASK_64
    return value


def hash_text(text: str) -> int:
    """Hash the UTF-8 encoding of ``text``."""

    return fnv1a_64(text.encode("utf-8"))


__all__ = ["FNV_OFFSET_BASIS", "FNV_PRIME", "MASK_64", "fnv1a_64", "hash_text"]
