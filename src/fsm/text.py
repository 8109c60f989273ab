"""Text-safety helpers for emitted JavaScript fragments."""

from __future__ import annotations

import json
import re

INDENT = "  "
RECORD_SEPARATOR = ",\n"

_WHITESPACE = re.compile(r"\s+")
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_$]")
_TRAILING_SEPARATOR = re.compile(r",\s*$")

JS_RESERVED_WORDS = frozenset(
    {
        "await", "break", "case", "catch", "class", "const", "continue", "debugger",
        "default", "delete", "do", "else", "enum", "export", "extends", "false",
        "finally", "for", "function", "if", "implements", "import", "in",
        "instanceof", "interface", "let", "new", "null", "package", "private",
        "protected", "public", "return", "static", "super", "switch", "this",
        "throw", "true", "try", "typeof", "undefined", "var", "void", "while",
        "with", "yield",
        # Names the generated handlers bind as parameters
        "api", "context", "events", "readOnlyMemory",
    }
)


def quote(raw: object) -> str:
    """Render ``raw`` as a double-quoted JavaScript string literal."""
    return json.dumps(str(raw), ensure_ascii=False)


def sanitize_identifier(raw: object) -> str:
    """Map an author-supplied name to a valid JavaScript identifier.

    Deterministic. Distinct names may collide ("my var" and "my-var" both
    become "my_var"); callers accept that.
    """
    name = _WHITESPACE.sub("_", str(raw).strip())
    name = _NON_IDENTIFIER.sub("_", name)
    if not name:
        return "_"
    if name[0].isdigit():
        name = "_" + name
    if name in JS_RESERVED_WORDS:
        name += "_"
    return name


def strip_trailing_separator(text: str) -> str:
    """Trim whitespace and a single dangling comma from the end of ``text``."""
    return _TRAILING_SEPARATOR.sub("", text.strip())


def close_dangling_scope(fragment: str) -> str:
    """Terminate a fragment that is a bare ``{ ... }`` block.

    A trailing empty statement keeps the fragment composable when further
    statements are concatenated after it. Anything else passes through.
    """
    body = fragment.strip()
    if body.startswith("{") and body.endswith("}"):
        return body + ";\n"
    return fragment


def indent(code: str, prefix: str = INDENT) -> str:
    """Prefix every non-blank line of ``code``."""
    return "".join(
        prefix + line if line.strip() else line for line in code.splitlines(keepends=True)
    )


def join_records(fragments: list[str]) -> str:
    """Join record fragments into array-literal body text.

    Each fragment is normalized first so a rule that already appended a
    separator does not produce a double comma.
    """
    cleaned = [strip_trailing_separator(f) for f in fragments]
    return RECORD_SEPARATOR.join(f for f in cleaned if f)
