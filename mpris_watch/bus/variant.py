"""
Decoding of D-Bus variants.

sdbus hands out variants as ``(signature, value)`` tuples, containers of
variants (such as the ``a{sv}`` Metadata property) keep that representation
for each member. The helpers here unwrap them into plain Python values.
"""

from __future__ import annotations

from typing import Any

_CONTAINER_CLOSE = {"(": ")", "{": "}"}


def _type_end(signature: str, start: int) -> int:
    """Return the index right after the single complete type starting at start."""
    char = signature[start]
    if char == "a":
        return _type_end(signature, start + 1)
    if char in _CONTAINER_CLOSE:
        pos = start + 1
        while signature[pos] != _CONTAINER_CLOSE[char]:
            pos = _type_end(signature, pos)
        return pos + 1
    return start + 1


def split_signature(signature: str) -> list[str]:
    """Split a signature into its complete types."""
    result: list[str] = []
    pos = 0
    while pos < len(signature):
        end = _type_end(signature, pos)
        result.append(signature[pos:end])
        pos = end
    return result


def decode_value(signature: str, value: Any) -> Any:
    """Decode a value of the given (single complete type) signature."""
    if signature == "v":
        return unwrap_variant(value)
    if signature.startswith("a{"):
        key_sig, value_sig = split_signature(signature[2:-1])
        return {
            decode_value(key_sig, key): decode_value(value_sig, item)
            for key, item in value.items()
        }
    if signature.startswith("a"):
        return [decode_value(signature[1:], item) for item in value]
    if signature.startswith("("):
        return tuple(
            decode_value(member_sig, item)
            for member_sig, item in zip(split_signature(signature[1:-1]), value, strict=True)
        )
    return value


def unwrap_variant(variant: Any) -> Any:
    """Unwrap a ``(signature, value)`` variant tuple."""
    signature, value = variant
    return decode_value(signature, value)
