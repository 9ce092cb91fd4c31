"""Read definition documents from a file, an HTTP(S) URL, or stdin.

A definition is a YAML or JSON mapping. The format is taken from the file
suffix or the response content type when they name one, and sniffed from
the text otherwise. The result is a plain ``dict``; validation is
:func:`~designcli.parser.extractor.extract_definition`'s job.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from designcli.exceptions import SpecParseError

FETCH_TIMEOUT = 30.0

_SUFFIX_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_definition(source: str) -> dict[str, Any]:
    """Load the definition document at *source*.

    Args:
        source: A file path, an ``http://`` or ``https://`` URL, or ``-``
            for stdin.

    Raises:
        SpecParseError: The source cannot be read, is empty, or does not
            hold a YAML/JSON mapping.
    """
    if source == "-":
        text, fmt = _read_stdin(), None
    elif source.startswith(("http://", "https://")):
        text, fmt = _fetch(source)
    else:
        text, fmt = _read_file(Path(source))

    if not text.strip():
        raise SpecParseError(f"Definition is empty: {source}")
    return parse_document(text, fmt)


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc


def _fetch(url: str) -> tuple[str, Optional[str]]:
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching definition from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch definition from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    fmt = next((f for f in ("json", "yaml", "yml") if f in content_type), None)
    return response.text, "yaml" if fmt == "yml" else fmt


def _read_file(path: Path) -> tuple[str, Optional[str]]:
    if not path.is_file():
        raise SpecParseError(f"Definition file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read definition file {path}: {exc}") from exc
    return text, _SUFFIX_FORMATS.get(path.suffix.lower())


def parse_document(text: str, fmt: Optional[str] = None) -> dict[str, Any]:
    """Parse *text* as JSON or YAML into a mapping.

    With no *fmt* JSON is tried first, since its errors are more precise,
    and YAML second. Both errors are reported when neither parses.
    """
    errors: list[str] = []
    if fmt in (None, "json"):
        try:
            return _as_mapping(json.loads(text))
        except json.JSONDecodeError as exc:
            if fmt == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")
    try:
        return _as_mapping(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError("Failed to parse definition as JSON or YAML\n  " + "\n  ".join(errors))


def _as_mapping(document: Any) -> dict[str, Any]:
    if isinstance(document, dict):
        return document
    kind = "empty document" if document is None else type(document).__name__
    raise SpecParseError(f"Definition must be a JSON/YAML object (got {kind})")
