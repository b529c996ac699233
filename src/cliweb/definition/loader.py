"""Load command tree definitions from a URL, local file, or stdin.

This module handles all I/O for fetching raw definition documents and
converting them into Python dictionaries. JSON and YAML are both accepted,
with format detection from the file extension, the response content type,
or (as a last resort) the content itself.

After loading, the raw dict is passed to
:func:`~cliweb.definition.builder.build_tree`, which validates it and
produces the :class:`~cliweb.models.CommandNode` tree.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from cliweb.exceptions import DefinitionError


def load_definition(source: str) -> dict[str, Any]:
    """Load a definition from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed definition as a dictionary.

    Raises:
        DefinitionError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise DefinitionError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise DefinitionError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a definition from *url*, using the content type as a format hint.

    Raises:
        DefinitionError: If the URL cannot be fetched or the content cannot
            be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DefinitionError(
            f"HTTP {exc.response.status_code} fetching definition from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise DefinitionError(f"Failed to fetch definition from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a definition from a local ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        DefinitionError: If the file is missing, unreadable, empty, or
            cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise DefinitionError(f"Definition file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DefinitionError(f"Failed to read definition file {path}: {exc}") from exc

    if not content.strip():
        raise DefinitionError(f"Definition file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and
    produces better error messages for JSON documents.

    Raises:
        DefinitionError: If the content cannot be parsed as either format,
            or the document is not a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise DefinitionError(
                    "Definition must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise DefinitionError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise DefinitionError(
                "Definition must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse definition as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise DefinitionError(msg)
