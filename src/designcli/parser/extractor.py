"""Validate a raw definition document into an :class:`~designcli.models.APIDefinition`.

The document mirrors the model, with a few shorthands that keep
hand-written YAML short. Resources, actions and security schemes may be
given either as lists of objects with a ``name`` or as mappings keyed by
name. Routes may be written as ``"GET /widgets/:id"``. Attribute sets
may be written as ``{name: attribute}`` with ``required: true`` on the
attribute. Attributes may be written as a bare kind such as ``integer``.
File servers may be a ``{request_path: file_path}`` mapping::

    name: shelf
    host: shelf.example.com
    security: api_key
    security_schemes:
      api_key: {type: apiKey, in: header, key_name: X-Shelf-Key}
    resources:
      book:
        base_path: /books
        actions:
          show:
            routes: ["GET /:id"]
            params:
              id: {type: integer, required: true}

Mapping order is declaration order.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from designcli.exceptions import DefinitionError, SpecParseError
from designcli.models import APIDefinition

_ATTRIBUTE_SET_KEYS = frozenset({"attributes", "required", "non_zero"})


def extract_definition(raw: dict[str, Any]) -> APIDefinition:
    """Build an :class:`~designcli.models.APIDefinition` from *raw*.

    Args:
        raw: The document as returned by
            :func:`~designcli.parser.loader.load_definition`.

    Returns:
        The validated, immutable definition.

    Raises:
        SpecParseError: If the document lacks a top-level ``name``.
        DefinitionError: If the document does not match the model, or
            declares the same resource or action twice.
    """
    if not raw.get("name"):
        raise SpecParseError("Missing 'name' field. Is this an API definition document?")

    data = dict(raw)
    data["resources"] = [
        _normalize_resource(r) for r in _named_list(raw.get("resources"), "resource")
    ]
    data["security_schemes"] = _named_list(raw.get("security_schemes"), "security scheme")
    _check_unique([r["name"] for r in data["resources"]], "resource")

    try:
        return APIDefinition.model_validate(data)
    except ValidationError as exc:
        raise _definition_error(exc, data) from exc


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------


def _named_list(value: Any, what: str) -> list[dict[str, Any]]:
    """Turn ``{name: body}`` into ``[{"name": name, **body}]``; lists pass through."""
    if value is None:
        return []
    if isinstance(value, dict):
        items = []
        for name, body in value.items():
            if body is None:
                body = {}
            if not isinstance(body, dict):
                raise DefinitionError(f"{what} '{name}' must be an object")
            items.append({**body, "name": str(name)})
        return items
    if isinstance(value, list):
        for item in value:
            if not isinstance(item, dict) or "name" not in item:
                raise DefinitionError(f"every {what} in a list needs a 'name'")
        return [dict(item) for item in value]
    raise DefinitionError(f"{what}s must be a list or a mapping")


def _normalize_resource(resource: dict[str, Any]) -> dict[str, Any]:
    name = resource["name"]
    actions = [_normalize_action(a) for a in _named_list(resource.get("actions"), "action")]
    _check_unique([a["name"] for a in actions], "action", resource=name)

    file_servers = resource.get("file_servers") or []
    if isinstance(file_servers, dict):
        file_servers = [
            {"request_path": path, "file_path": target}
            for path, target in file_servers.items()
        ]
    return {**resource, "actions": actions, "file_servers": file_servers}


def _normalize_action(action: dict[str, Any]) -> dict[str, Any]:
    result = dict(action)
    result["routes"] = [_normalize_route(r) for r in action.get("routes") or []]
    if action.get("payload") is not None:
        result["payload"] = _normalize_attribute(action["payload"])
    for key in ("params", "headers"):
        if key in action:
            result[key] = _normalize_attribute_set(action[key])
    return result


def _normalize_route(route: Any) -> Any:
    if isinstance(route, str):
        verb, _, path = route.strip().partition(" ")
        return {"verb": verb, "path": path.strip()}
    return route


def _normalize_attribute(attribute: Any) -> Any:
    if isinstance(attribute, str):
        return {"type": attribute}
    if isinstance(attribute, dict):
        return {k: v for k, v in attribute.items() if k != "required"}
    return attribute


def _normalize_attribute_set(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    if "attributes" in value and set(value) <= _ATTRIBUTE_SET_KEYS:
        attributes = value.get("attributes") or {}
        return {
            **value,
            "attributes": {n: _normalize_attribute(a) for n, a in attributes.items()},
        }
    required = [
        name for name, attr in value.items()
        if isinstance(attr, dict) and attr.get("required") is True
    ]
    return {
        "attributes": {n: _normalize_attribute(a) for n, a in value.items()},
        "required": required,
    }


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _check_unique(names: list[str], what: str, resource: str | None = None) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise DefinitionError(f"duplicate {what} '{name}'", resource=resource)
        seen.add(name)


def _definition_error(exc: ValidationError, data: dict[str, Any]) -> DefinitionError:
    """Convert the first validation error into a located :class:`DefinitionError`."""
    first = exc.errors()[0]
    loc = list(first.get("loc", ()))
    resource = action = None
    if len(loc) >= 2 and loc[0] == "resources" and isinstance(loc[1], int):
        res = data["resources"][loc[1]]
        resource = res.get("name")
        if len(loc) >= 4 and loc[2] == "actions" and isinstance(loc[3], int):
            action = res["actions"][loc[3]].get("name")
    where = ".".join(str(part) for part in loc)
    return DefinitionError(f"{where}: {first.get('msg')}", resource=resource, action=action)
