"""Route resolution for generated commands.

An action may be reachable through several routes, but generated commands
build their default request path from the *canonical* route -- the first
one declared. This module turns that route into:

* the ordered wildcard parameters needed to fill it
  (:func:`default_route_params`, :func:`route_arguments`),
* a positional format string (:func:`default_route_template`) so the
  generated code can render the path with ``template.format(*args)``,
* a human-readable summary of every route (:func:`route_summary`) used in
  command help.

:func:`path_param_names` and :func:`query_params` split the declared params
between the path and the query string, looking at every route's full path.

Full paths are assembled by :func:`full_path`: API base path, then resource
base path, then route path, unless the route is absolute (``//...``).
"""

from __future__ import annotations

from designcli.exceptions import DefinitionError
from designcli.generator.param_mapper import FieldRef, python_type_name, sanitize_param_name
from designcli.models import (
    WILDCARD_RE,
    ActionDefinition,
    APIDefinition,
    Attribute,
    AttributeSet,
    DataKind,
    RouteDefinition,
)


def canonical_route(action: ActionDefinition) -> RouteDefinition:
    """Return the first declared route of *action*.

    Raises:
        DefinitionError: If the action declares no route at all.
    """
    if not action.routes:
        raise DefinitionError(
            "no route declared", resource=action.resource, action=action.name
        )
    return action.routes[0]


def full_path(api: APIDefinition, action: ActionDefinition, route: RouteDefinition) -> str:
    """Return the complete request path of *route*.

    Args:
        api: The API the action belongs to (supplies the API base path).
        action: The action owning *route* (its handle supplies the resource
            base path).
        route: The route to expand.

    Returns:
        The joined path, e.g. ``/api`` + ``/widgets`` + ``/:id`` gives
        ``/api/widgets/:id``.  Absolute routes drop their first slash and
        skip both base paths.
    """
    if route.is_absolute:
        return route.path[1:]
    resource = api.resource(action.resource)
    base = resource.base_path if resource is not None else ""
    return _join_paths(api.base_path, base, route.path)


def extract_wildcards(path: str) -> list[str]:
    """Return the wildcard names of *path* in order of appearance.

    Example::

        >>> extract_wildcards("/widgets/:id/parts/:partId")
        ['id', 'partId']
    """
    return WILDCARD_RE.findall(path)


def default_route_params(api: APIDefinition, action: ActionDefinition) -> AttributeSet:
    """Return the parameters needed to build the canonical route of *action*.

    Every wildcard name of the canonical full path is included, in path
    order, and marked non-zero: those values are interpolated positionally
    into the path so they must always be rendered.  Types come from the
    action's declared params; undeclared wildcards default to strings.

    Raises:
        DefinitionError: If the action has no route or the canonical route
            repeats a wildcard name.
    """
    route = canonical_route(action)
    names = _checked_wildcards(full_path(api, action, route), action)
    declared = action.params.attributes
    return AttributeSet(
        attributes={n: declared.get(n, Attribute(type=DataKind.STRING)) for n in names},
        required=[n for n in names if action.params.is_required(n)],
        non_zero=list(names),
    )


def default_route_template(api: APIDefinition, action: ActionDefinition) -> str:
    """Return a positional format string rendering the canonical route.

    Each wildcard segment is replaced by ``/{}``; literal braces in the path
    are doubled so they survive :meth:`str.format`.

    Example::

        /widgets/:id/parts/:partId  ->  /widgets/{}/parts/{}
    """
    route = canonical_route(action)
    path = full_path(api, action, route)
    _checked_wildcards(path, action)
    escaped = path.replace("{", "{{").replace("}", "}}")
    return WILDCARD_RE.sub("/{}", escaped)


def route_arguments(api: APIDefinition, action: ActionDefinition) -> list[FieldRef]:
    """Return field references filling :func:`default_route_template`, in wildcard order."""
    params = default_route_params(api, action)
    return [
        FieldRef(
            name=name,
            attr=sanitize_param_name(name),
            kind=attr.type,
            required=params.is_required(name),
            non_zero=True,
            nullable=False,
            location="path",
            annotation=python_type_name(attr),
        )
        for name, attr in params.attributes.items()
    ]


def route_summary(api: APIDefinition, action: ActionDefinition) -> str:
    """Summarise every route of *action* for help text.

    Wildcard segments are upper-cased to mark them as variables. Several
    routes are rendered as a parenthesised alternation.

    Example::

        >>> route_summary(api, show)           # one route
        '/widgets/ID'
        >>> route_summary(api, show_by_slug)   # two routes
        '(/widgets/ID|/widgets/slug/SLUG)'
    """
    canonical_route(action)
    paths = [full_path(api, action, r) for r in action.routes]
    for path in paths:
        _checked_wildcards(path, action)
    paths = [_upper_wildcards(p) for p in paths]
    if len(paths) > 1:
        return "(" + "|".join(paths) + ")"
    return paths[0]


def path_param_names(api: APIDefinition, action: ActionDefinition) -> list[str]:
    """Return the wildcard names of every full route path of *action*.

    Base path wildcards count, so a ``:shelfId`` in the resource base path
    binds the ``shelfId`` param to the path. Names are in first-seen order.

    Raises:
        DefinitionError: If any route repeats a wildcard name.
    """
    names: list[str] = []
    for route in action.routes:
        for name in _checked_wildcards(full_path(api, action, route), action):
            if name not in names:
                names.append(name)
    return names


def query_params(api: APIDefinition, action: ActionDefinition) -> AttributeSet:
    """Return the declared params of *action* not bound to a route wildcard."""
    bound = set(path_param_names(api, action))
    params = action.params
    return AttributeSet(
        attributes={n: a for n, a in params.attributes.items() if n not in bound},
        required=[n for n in params.required if n not in bound],
        non_zero=[n for n in params.non_zero if n not in bound],
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _checked_wildcards(path: str, action: ActionDefinition) -> list[str]:
    names = extract_wildcards(path)
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise DefinitionError(
            f"route '{path}' repeats wildcard(s) {', '.join(duplicates)}",
            resource=action.resource,
            action=action.name,
        )
    return names


def _upper_wildcards(path: str) -> str:
    return WILDCARD_RE.sub(lambda m: "/" + m.group(1).upper(), path)


def _join_paths(*parts: str) -> str:
    """Join path fragments with single slashes, keeping a trailing slash."""
    joined = ""
    for part in parts:
        if not part:
            continue
        if joined.endswith("/") and part.startswith("/"):
            joined += part[1:]
        elif joined and not joined.endswith("/") and not part.startswith("/"):
            joined += "/" + part
        else:
            joined += part
    if not joined.startswith("/"):
        joined = "/" + joined
    return joined
