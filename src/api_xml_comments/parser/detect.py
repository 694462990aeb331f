"""Detect whether an API document is serialized as JSON or YAML."""

import json
from pathlib import Path

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


def detect_format(file_path: Path) -> str:
    """Detect the serialization format of an OpenAPI document.

    Returns: 'json' or 'yaml'.
    """
    suffix = file_path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in YAML_SUFFIXES:
        return "yaml"

    # No telling suffix: JSON if it parses as JSON, YAML otherwise
    text = file_path.read_text(encoding="utf-8")
    try:
        json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return "yaml"
    return "json"


def format_for_output(output: Path, source: Path) -> str:
    """Pick the output format from the output suffix, else follow the source."""
    suffix = output.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in YAML_SUFFIXES:
        return "yaml"
    return detect_format(source)
