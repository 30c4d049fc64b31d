# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header block utilities.

HTTP header field names are case-insensitive (RFC 9110). Cache classification works on
the raw header block of a response, redirect hops included, so lookups here operate on
text: a name matches at the start of a line up to the first colon, and when a name
repeats the last occurrence wins. A header with an empty value counts as absent.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


def iter_header_lines(raw_headers: str | None) -> Iterator[tuple[str, str]]:
    """Yield `(lowercase_name, value)` pairs from a raw header block, skipping status lines and empty values."""
    if not raw_headers:
        return
    for line in raw_headers.splitlines():
        if not line or line[0] in " \t":
            continue
        name, sep, value = line.partition(":")
        if not sep:
            continue
        name = name.rstrip().lower()
        value = value.strip()
        if not name or not value or name.startswith("http/"):
            continue
        yield name, value


def header_value(raw_headers: str | None, name: str) -> str | None:
    """Return the last non-empty value of `name` in a raw block, or None when absent."""
    if not name:
        return None
    wanted = name.strip().lower()
    found: str | None = None
    for key, value in iter_header_lines(raw_headers):
        if key == wanted:
            found = value
    return found


def status_lines(raw_headers: str | None) -> list[str]:
    """Return the `HTTP/...` status lines of a raw block, one per hop."""
    if not raw_headers:
        return []
    return [line.strip() for line in raw_headers.splitlines() if line.strip().upper().startswith("HTTP/")]


def format_header_block(status_line: str, items: Iterable[tuple[str, str]]) -> str:
    """Render one hop as a CRLF-delimited header block terminated by a blank line."""
    lines = [status_line] if status_line else []
    lines.extend(f"{key}: {value}" for key, value in items)
    return "\r\n".join(lines) + "\r\n\r\n"


def headers_to_block(headers: Mapping[object, object] | None, status_line: str = "") -> str:
    """Render a header mapping as a raw block (used for fixtures and adapters)."""
    items: list[tuple[str, str]] = []
    for key, value in (headers or {}).items():
        if key is None:
            continue
        items.append((str(key), "" if value is None else str(value)))
    return format_header_block(status_line, items)


def normalize_headers(headers: Mapping[object, object] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    if not headers:
        return {}
    out: dict[str, str] = {}
    for key, value in headers.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


__all__ = [
    "format_header_block",
    "header_value",
    "headers_to_block",
    "iter_header_lines",
    "normalize_headers",
    "status_lines",
]
