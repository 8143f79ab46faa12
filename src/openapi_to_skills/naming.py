"""Identifier normalisation for generated files and directories.

Three pure, total functions (they never raise):

* :func:`to_file_name` -- a filesystem-legal token for per-document file
  names. Unicode letters in any script are preserved, as is case.
* :func:`to_skill_name` -- a portable lower-case ASCII slug used only for the
  bundle's own directory name.
* :func:`extract_schema_prefix` -- the grouping key for a schema name.

Example::

    >>> to_file_name("My Awesome API!")
    'My-Awesome-API'
    >>> to_skill_name("My Awesome API!")
    'my-awesome-api'
    >>> extract_schema_prefix("UserProfile")
    'User'
"""

from __future__ import annotations

import re
import unicodedata

FALLBACK_FILE_NAME = "unnamed"
"""Returned by :func:`to_file_name` when nothing survives normalisation."""

FALLBACK_SCHEMA_PREFIX = "Other"
"""Returned by :func:`extract_schema_prefix` for an empty name."""

SKILL_NAME_MAX_LENGTH = 64

# : < > | " * ? \ / and the ASCII control range
_ILLEGAL_CHARS = re.compile(r'[:<>|"*?\\/\x00-\x1f\x7f]')
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-{2,}")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")
_PASCAL_HEAD = re.compile(r"^([A-Z][a-z]+)")


def to_file_name(name: str) -> str:
    """Convert an arbitrary title or name into a filesystem-legal token.

    Rules, in order:

    1. Characters illegal on common filesystems (``: < > | " * ? \\ /``) and
       ASCII control characters become ``-``.
    2. Runs of whitespace become ``-``.
    3. The remainder is normalised to NFC.
    4. Remaining punctuation and symbols other than ``_`` and ``.``
       (``!``, ``@``, ``#``, emoji...) become ``-``.
    5. Runs of two or more ``-`` collapse into one.
    6. Leading and trailing ``-`` are trimmed.
    7. A result made only of dots (``.``, ``..``) counts as empty.

    Letters, marks and digits in any script, including CJK, are kept
    verbatim and case is preserved.

    Args:
        name: Any string (tag, operation ID, schema name...).

    Returns:
        The normalised token, or ``"unnamed"`` if the result is empty.
    """
    result = _ILLEGAL_CHARS.sub("-", name)
    result = _WHITESPACE.sub("-", result)
    result = unicodedata.normalize("NFC", result)
    result = "".join(ch if _is_name_char(ch) else "-" for ch in result)
    result = _HYPHEN_RUNS.sub("-", result)
    result = result.strip("-")
    if not result.strip("."):
        return FALLBACK_FILE_NAME
    return result


def _is_name_char(ch: str) -> bool:
    """Letters (L*), marks (M*), numbers (N*), and ``- _ .``."""
    return ch in "-_." or unicodedata.category(ch)[0] in "LMN"


def to_skill_name(name: str) -> str:
    """Convert a title into the bundle's directory name.

    Stricter than :func:`to_file_name`: every character outside
    ``[a-zA-Z0-9]`` becomes a hyphen, hyphens are collapsed and trimmed, the
    result is lower-cased and cut to 64 characters.

    Args:
        name: Usually ``info.title`` from the spec.

    Returns:
        A lower-case ASCII slug (possibly empty for a title with no ASCII
        alphanumerics).
    """
    slug = _NON_ALNUM.sub("-", name)
    slug = _HYPHEN_RUNS.sub("-", slug).strip("-")
    return slug.lower()[:SKILL_NAME_MAX_LENGTH]


def extract_schema_prefix(name: str) -> str:
    """Derive the grouping key for a schema name.

    Precedence:

    1. The leading PascalCase word (``UserProfile`` -> ``User``).
    2. The part before the first underscore (``user_profile`` -> ``user``).
    3. The whole name (``API`` -> ``API``).

    Args:
        name: A key of ``components.schemas``.

    Returns:
        The prefix, or ``"Other"`` for an empty name.
    """
    if not name:
        return FALLBACK_SCHEMA_PREFIX

    match = _PASCAL_HEAD.match(name)
    if match:
        return match.group(1)

    head = name.split("_", 1)[0]
    if head:
        return head

    return name
