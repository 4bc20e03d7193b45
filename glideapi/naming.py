"""Identifier transforms shared by every generator.

All derived names (type names, variable names, file names) are pure functions
of a normalized module name and a separator.  Empty segments produced by
leading, trailing or repeated separators are dropped before re-joining, so
``"blog--posts"`` and ``"blog-posts"`` derive the same identifiers.
"""

from __future__ import annotations

import re

from .errors import GenerationFailure

DEFAULT_SEPARATOR = "-"

# A normalized module name: also a valid identifier once camel-cased.
MODULE_NAME_PATTERN = re.compile(r"[a-z][a-z0-9-]*")


def _segments(text: str, separator: str) -> list[str]:
    """Split *text* on *separator*, lowercase each part and drop empty ones."""
    if not separator:
        raise ValueError("separator must be a non-empty string")
    return [part.lower() for part in text.split(separator) if part]


def to_camel_case(text: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """``"blog-posts"`` -> ``"blogPosts"``."""
    parts = _segments(text, separator)
    if not parts:
        return ""
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


def to_pascal_case(text: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """``"blog-posts"`` -> ``"BlogPosts"``."""
    return "".join(part.capitalize() for part in _segments(text, separator))


def to_title_case(text: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """``"express-mongodb"`` -> ``"Express Mongodb"``."""
    return " ".join(part.capitalize() for part in _segments(text, separator))


def normalize_module_name(raw: str) -> str:
    """Normalize a user-supplied module name to lowercase-hyphenated form.

    Whitespace and underscores become hyphens, repeated hyphens collapse and
    leading/trailing hyphens are stripped::

        normalize_module_name("  Blog Posts ") -> "blog-posts"
        normalize_module_name("order_items")   -> "order-items"

    Raises:
        GenerationFailure: If nothing is left after trimming.
    """
    if raw is None or not raw.strip():
        raise GenerationFailure("Module name is required")
    name = re.sub(r"[\s_]+", DEFAULT_SEPARATOR, raw.strip().lower())
    name = re.sub(r"-{2,}", DEFAULT_SEPARATOR, name).strip(DEFAULT_SEPARATOR)
    if not name:
        raise GenerationFailure(f"Module name {raw!r} contains no usable characters")
    if not is_module_name(name):
        raise GenerationFailure(
            f"Module name {raw!r} must start with a letter and contain only "
            "letters, digits, spaces, hyphens or underscores"
        )
    return name


def is_module_name(name: str) -> bool:
    """True if *name* is already in normalized module-name form."""
    return MODULE_NAME_PATTERN.fullmatch(name) is not None
