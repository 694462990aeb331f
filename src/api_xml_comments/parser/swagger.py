"""OpenAPI / Swagger document reader and writer.

Parses OpenAPI 3.x and Swagger 2.0 documents into ApiOperation models,
and writes merged descriptions back into the raw document.
"""

import json
import logging
from pathlib import Path

import yaml

from .base import ApiOperation, ApiParameter, ApiResponse

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "PUT", "POST", "DELETE", "OPTIONS", "HEAD", "PATCH", "TRACE")


class DocumentLoadError(Exception):
    """Raised when an OpenAPI/Swagger file cannot be read or is not a mapping."""


def load_document(file_path: Path) -> dict:
    """Read an OpenAPI/Swagger file (YAML or JSON) into a dict.

    Raises:
        DocumentLoadError: if the file is unreadable, not valid YAML/JSON,
            or its top level is not a mapping.
    """
    try:
        doc = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"Cannot load API document {file_path}: {e}") from e

    if not isinstance(doc, dict):
        raise DocumentLoadError(f"{file_path} is not an OpenAPI/Swagger document (top level is {type(doc).__name__})")
    return doc


def dump_document(doc: dict, file_path: Path, fmt: str) -> None:
    """Write *doc* to *file_path* as 'json' or 'yaml'."""
    if fmt == "json":
        text = json.dumps(doc, indent=2, ensure_ascii=False) + "\n"
    else:
        text = yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(text, encoding="utf-8")


def parse_openapi(doc: dict) -> list[ApiOperation]:
    """Collect every operation of an OpenAPI/Swagger document."""
    operations = []
    paths = doc.get("paths") or {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        shared_params = path_item.get("parameters") or []

        for method, operation in path_item.items():
            if method.upper() not in HTTP_METHODS or not isinstance(operation, dict):
                continue

            operations.append(
                ApiOperation(
                    method=method.upper(),
                    path=path,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    parameters=_parse_parameters(shared_params, operation.get("parameters") or []),
                    responses=_parse_responses(operation.get("responses") or {}),
                )
            )

    return operations


def _parse_parameters(shared: list[dict], own: list[dict]) -> list[ApiParameter]:
    # Operation-level parameters override path-level ones with the same name and location
    merged: dict[tuple[str, str], dict] = {}
    for p in [*shared, *own]:
        if "name" not in p:
            logger.debug("Skipping parameter without a name: %s", p.get("$ref", p))
            continue
        merged[(p["name"], p.get("in", "query"))] = p

    return [
        ApiParameter(
            name=p["name"],
            location=p.get("in", "query"),
            description=p.get("description"),
        )
        for p in merged.values()
    ]


def _parse_responses(responses: dict) -> dict[str, ApiResponse]:
    result = {}
    for status_code, resp in responses.items():
        if isinstance(resp, dict) and "$ref" in resp:
            logger.debug("Skipping response %s defined by reference: %s", status_code, resp["$ref"])
            continue
        description = resp.get("description") if isinstance(resp, dict) else None
        result[str(status_code)] = ApiResponse(description=description)
    return result


def apply_operations(doc: dict, operations: list[ApiOperation]) -> None:
    """Write operation summaries and descriptions back into *doc* in place.

    Fields still ``None`` on the models are left untouched. A merged
    description for a path-level parameter is written as an operation-level
    override so sibling operations keep their own text.
    """
    paths = doc.get("paths") or {}
    for op in operations:
        path_item = paths.get(op.path)
        if not isinstance(path_item, dict):
            continue
        raw = path_item.get(op.method.lower())
        if not isinstance(raw, dict):
            continue

        if op.summary is not None:
            raw["summary"] = op.summary
        if op.description is not None:
            raw["description"] = op.description
        _apply_parameters(path_item, raw, op.parameters)
        _apply_responses(raw, op.responses)


def _apply_parameters(path_item: dict, raw: dict, parameters: list[ApiParameter]) -> None:
    own = {(p["name"], p.get("in", "query")): p for p in (raw.get("parameters") or []) if "name" in p}
    shared = {(p["name"], p.get("in", "query")): p for p in (path_item.get("parameters") or []) if "name" in p}

    for param in parameters:
        if param.description is None:
            continue
        key = (param.name, param.location)
        if key in own:
            own[key]["description"] = param.description
        elif key in shared and shared[key].get("description") != param.description:
            override = dict(shared[key], description=param.description)
            if not raw.get("parameters"):
                raw["parameters"] = []
            raw["parameters"].append(override)


def _apply_responses(raw: dict, responses: dict[str, ApiResponse]) -> None:
    target = raw.get("responses")
    if target is None:
        target = raw["responses"] = {}
    # YAML loads unquoted status codes as ints
    keys = {str(k): k for k in target}

    for code, response in responses.items():
        if response.description is None:
            continue
        key = keys.get(code, code)
        entry = target.get(key)
        if isinstance(entry, dict) and "$ref" in entry:
            logger.debug("Not writing response %s defined by reference: %s", code, entry["$ref"])
            continue
        if not isinstance(entry, dict):
            entry = target[key] = {}
        entry["description"] = response.description
