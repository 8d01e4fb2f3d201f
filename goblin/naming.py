"""Naming-convention helpers.

Pure functions for converting between ``snake_case``, ``camelCase`` and
``PascalCase``, validating operator-supplied names, and pluralising entity
names for table names and list methods.
"""

from __future__ import annotations

import re

_SNAKE_CASE_RE = re.compile(r"^[a-z0-9]+(_[a-z0-9]+)*$")

# Irregular plurals that show up in typical CRUD entity names.
_IRREGULAR_PLURALS: dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "ox": "oxen",
}

_UNCOUNTABLE: frozenset[str] = frozenset({
    "equipment",
    "information",
    "rice",
    "money",
    "species",
    "series",
    "fish",
    "sheep",
    "news",
    "metadata",
    "data",
})


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def is_snake_case(value: str) -> bool:
    """Return ``True`` if *value* is lowercase words joined by single underscores."""
    return bool(_SNAKE_CASE_RE.match(value))


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


def snake_to_pascal(value: str) -> str:
    """Convert ``user_profile`` to ``UserProfile``."""
    return "".join(part[:1].upper() + part[1:] for part in value.split("_") if part)


def snake_to_camel(value: str) -> str:
    """Convert ``user_profile`` to ``userProfile``."""
    pascal = snake_to_pascal(value)
    return pascal[:1].lower() + pascal[1:]


def pascal_to_snake(value: str) -> str:
    """Convert ``UserProfile`` to ``user_profile``.

    Runs of capitals are kept together, so ``HTTPServer`` becomes
    ``http_server``.
    """
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def to_upper_snake(value: str) -> str:
    """Convert ``send_email`` or ``SendEmail`` to ``SEND_EMAIL``."""
    if is_snake_case(value):
        return value.upper()
    return pascal_to_snake(value).upper()


# ---------------------------------------------------------------------------
# Pluralisation
# ---------------------------------------------------------------------------


def pluralize(word: str) -> str:
    """Return the English plural of *word*.

    Works on the last ``_``-separated segment so ``order_item`` becomes
    ``order_items``.  PascalCase input keeps its casing
    (``Category`` -> ``Categories``).
    """
    if not word:
        return word

    head, sep, last = word.rpartition("_")
    lower = last.lower()

    if lower in _UNCOUNTABLE:
        plural = last
    elif lower in _IRREGULAR_PLURALS:
        plural = _match_case(last, _IRREGULAR_PLURALS[lower])
    elif re.search(r"[^aeiou]y$", lower):
        plural = last[:-1] + "ies"
    elif re.search(r"(s|x|z|ch|sh)$", lower):
        plural = last + "es"
    elif re.search(r"[^f]fe$", lower):
        plural = last[:-2] + "ves"
    elif re.search(r"[^f]f$", lower) and lower not in {"chief", "roof", "belief", "proof"}:
        plural = last[:-1] + "ves"
    else:
        plural = last + "s"

    return f"{head}{sep}{plural}"


def _match_case(original: str, replacement: str) -> str:
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


# ---------------------------------------------------------------------------
# Module paths
# ---------------------------------------------------------------------------


def folder_to_module(folder: str) -> str:
    """Convert a folder path such as ``app/models`` to ``app.models``."""
    parts = [p for p in re.split(r"[\\/]+", folder.strip()) if p and p != "."]
    return ".".join(parts)
