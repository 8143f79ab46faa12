"""Read OpenAPI documents from a file, a URL or stdin.

Loading happens in two steps. The source is first read into text together
with a format hint (the file extension, or the response ``Content-Type``);
:func:`parse_document` then decodes the text as JSON or YAML. JSON is tried
first when there is no hint, since every JSON document is also YAML and the
JSON parser gives sharper errors.

:func:`validate_spec` performs the only structural checks the converter
needs. Everything past them is tolerated by
:func:`~openapi_to_skills.parser.extractor.parse_spec`.

Every failure is raised as :class:`~openapi_to_skills.exceptions.SpecParseError`
so the CLI can exit with a single code for "the document is unusable".
"""

from __future__ import annotations

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from openapi_to_skills.exceptions import SpecParseError

logger = logging.getLogger(__name__)

STDIN_SOURCE = "-"
FETCH_TIMEOUT = 30.0

_JSON = "json"
_YAML = "yaml"
_SUFFIX_HINTS = {".json": _JSON, ".yaml": _YAML, ".yml": _YAML}

_BOOL_TAG = "tag:yaml.org,2002:bool"


class _SpecLoader(yaml.SafeLoader):
    """Safe loader that reads only ``true`` and ``false`` as booleans.

    PyYAML follows YAML 1.1, where bare ``on``, ``off``, ``yes`` and ``no``
    are booleans too. OpenAPI documents use those words as property names
    and enum values, so they are kept as strings.
    """


_SpecLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_SpecLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document.

    Args:
        source: ``-`` for stdin, an ``http://`` or ``https://`` URL, or a
            local path.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If the source cannot be read or decoded.
    """
    if source == STDIN_SOURCE:
        text, hint, origin = _read_stdin(), "", "stdin"
    elif source.startswith(("http://", "https://")):
        text, hint = _fetch_url(source)
        origin = source
    else:
        text, hint = _read_file(source)
        origin = source
    return parse_document(text, hint=hint, origin=origin)


def _read_stdin() -> str:
    try:
        text = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not text.strip():
        raise SpecParseError("No input received from stdin")
    return text


def _fetch_url(url: str) -> tuple[str, str]:
    """GET *url* and return its body with a hint from ``Content-Type``."""
    logger.debug("Fetching spec from %s", url)
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "").lower()
    if _JSON in content_type:
        hint = _JSON
    elif _YAML in content_type or "yml" in content_type:
        hint = _YAML
    else:
        hint = ""
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    """Read a local file and return its text with a hint from the suffix."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    if not text.strip():
        raise SpecParseError(f"Spec file is empty: {path}")
    return text, _SUFFIX_HINTS.get(file_path.suffix.lower(), "")


def parse_document(text: str, hint: str = "", origin: str = "input") -> dict[str, Any]:
    """Decode *text* as JSON or YAML.

    Args:
        text: Raw document text.
        hint: ``"json"`` decodes as JSON only, ``"yaml"`` as YAML only;
            anything else tries JSON and then YAML.
        origin: Where the text came from, for error messages.

    Returns:
        The decoded mapping.

    Raises:
        SpecParseError: If decoding fails or the top level is not a mapping.
    """
    if hint == _JSON:
        try:
            return _require_mapping(json.loads(text), origin)
        except json.JSONDecodeError as exc:
            raise SpecParseError(f"Invalid JSON in {origin}: {exc}") from exc

    problems: list[str] = []
    if hint != _YAML:
        try:
            return _require_mapping(json.loads(text), origin)
        except json.JSONDecodeError as exc:
            problems.append(f"JSON error: {exc}")
    try:
        return _require_mapping(yaml.load(text, Loader=_SpecLoader), origin)
    except yaml.YAMLError as exc:
        problems.append(f"YAML error: {exc}")

    details = "".join(f"\n  {problem}" for problem in problems)
    raise SpecParseError(f"Failed to parse {origin} as JSON or YAML{details}")


def _require_mapping(document: Any, origin: str) -> dict[str, Any]:
    if isinstance(document, dict):
        return document
    kind = "an empty document" if document is None else type(document).__name__
    raise SpecParseError(f"{origin} must contain a JSON/YAML object, got {kind}")


def validate_spec(spec: dict[str, Any]) -> str:
    """Check the fields conversion depends on and return the OpenAPI version.

    The document needs an ``openapi`` field with a 3.x version, a non-empty
    ``info.title`` and a ``paths`` object. Swagger 2.x is rejected with a
    pointer to a converter. 3.x versions other than 3.0 pass with a logged
    warning.

    Raises:
        SpecParseError: If any of these checks fails.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x documents can be converted. "
            "Consider converting with https://converter.swagger.io"
        )

    if spec.get("openapi") is None:
        raise SpecParseError('Invalid OpenAPI spec: missing "openapi" field')
    version = str(spec["openapi"])
    if not version.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version}. "
            "Only OpenAPI 3.0.x documents can be converted."
        )
    if not version.startswith("3.0."):
        logger.warning("OpenAPI %s is not fully supported; converting as 3.0", version)

    info = spec.get("info")
    if not isinstance(info, dict) or not info.get("title"):
        raise SpecParseError('Invalid OpenAPI spec: missing "info.title" field')
    if not isinstance(spec.get("paths"), dict):
        raise SpecParseError('Invalid OpenAPI spec: missing "paths" field')
    return version
