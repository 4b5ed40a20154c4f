"""Commit record and its canonical on-disk form."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone

from pydantic import BaseModel

# Written as \u escapes inside strings so hashes match existing repositories
_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

# Lone surrogates: raw bytes of a non-UTF-8 argument or file name
_INVALID_UTF8_RE = re.compile("[\ud800-\udfff]")


def _utf8_safe(value: str) -> str:
    """Replace each byte that is not valid UTF-8 with U+FFFD."""
    return _INVALID_UTF8_RE.sub("\ufffd", value)


def rfc3339_now() -> str:
    """Current local time as an RFC-3339 string with second precision.

    UTC offsets are written as ``Z``, matching the timestamps already
    present in existing repositories.
    """
    stamp = datetime.now(timezone.utc).astimezone().isoformat(timespec="seconds")
    if stamp.endswith("+00:00"):
        stamp = stamp[:-6] + "Z"
    return stamp


class Commit(BaseModel):
    """An immutable snapshot: flat tree, metadata, and a parent link."""

    message: str
    timestamp: str
    author: str
    tree: dict[str, str]
    """Filename -> blob hash."""

    parent: str = ""
    """Hash of the previous commit on the branch, empty for the first one."""

    model_config = {"frozen": True}

    def to_canonical_json(self) -> bytes:
        """Serialize to the byte-exact form that is hashed and stored.

        Two-space indent, fixed field order, sorted tree keys, no trailing
        newline.  Bytes that are not valid UTF-8 become U+FFFD.
        """
        document = {
            "message": _utf8_safe(self.message),
            "timestamp": _utf8_safe(self.timestamp),
            "author": _utf8_safe(self.author),
            "tree": {
                _utf8_safe(name): _utf8_safe(object_id)
                for name, object_id in sorted(self.tree.items())
            },
            "parent": _utf8_safe(self.parent),
        }
        text = json.dumps(document, indent=2, ensure_ascii=False)
        for char, escape in _JSON_ESCAPES.items():
            text = text.replace(char, escape)
        return text.encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes | str) -> Commit:
        """Parse a stored commit document.

        Raises :class:`pydantic.ValidationError` for anything that is not a
        commit object.
        """
        return cls.model_validate_json(data)
