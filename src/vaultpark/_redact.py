"""Helpers for safe debug logging.

A QR token is a bearer credential for a gate until it expires, so neither
tokens nor digests nor signing keys are written to logs verbatim.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from vaultpark._constants import DELIMITER

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "token",
        "qrdata",
        "qrcodedata",
        "qrcodedataused",
        "hash",
        "signingkey",
        "key",
        "secret",
        "password",
    }
)

_USER_STUB_CHARS = 3
_MAX_DEPTH = 20


def redact_token(token: Any) -> str:
    """Describe *token* without revealing it.

    Keeps the first field (the prefix) when it is short and printable, the
    field count, and the first characters of the user id.
    """
    if not isinstance(token, str):
        return f"<non-str:{type(token).__name__}>"
    if not token:
        return "<empty>"
    parts = token.split(DELIMITER)
    prefix = parts[0] if len(parts[0]) <= 16 and parts[0].isprintable() else "?"
    user = ""
    if len(parts) > 1 and parts[1]:
        stub = parts[1][:_USER_STUB_CHARS]
        user = f" user={stub}…" if stub.isprintable() else " user=?"
    return f"<token {prefix} fields={len(parts)}{user} len={len(token)}>"


def redact_for_log(value: Any, *, max_string: int = 256) -> Any:
    """Copy of a document or config mapping with secret-bearing keys masked.

    Keys match case-insensitively with underscores ignored, so ``qrCodeDataUsed``
    and ``qr_code_data_used`` are both caught.  Nested mappings and lists are
    walked; anything else is passed through ``repr``.
    """
    return _redact(value, max_string, 0)


def _is_sensitive(key: Any) -> bool:
    return str(key).replace("_", "").lower() in _SENSITIVE_VALUE_KEYS


def _redact(value: Any, max_string: int, depth: int) -> Any:
    if depth > _MAX_DEPTH:
        return "<max-depth>"
    match value:
        case None | bool() | int() | float():
            return value
        case str():
            return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
        case bytes() | bytearray():
            return f"<bytes:{len(value)}b>"
        case Mapping():
            return {
                str(k): "<redacted>" if _is_sensitive(k) else _redact(v, max_string, depth + 1)
                for k, v in value.items()
            }
        case Sequence():
            return [_redact(v, max_string, depth + 1) for v in value]
    return repr(value)
