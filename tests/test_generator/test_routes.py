"""Tests for designcli.generator.routes.

Covers:
- Full path assembly from API, resource and route paths
- Absolute routes skipping both base paths
- Canonical route parameters, their order and non-zero marking
- Positional templates and brace escaping
- Route summaries for one and several routes
- Path and query split over every full route path
- Structural faults: missing routes, repeated wildcards in any route
"""

from __future__ import annotations

import pytest

from designcli.exceptions import DefinitionError
from designcli.generator.routes import (
    canonical_route,
    default_route_params,
    default_route_template,
    extract_wildcards,
    full_path,
    path_param_names,
    query_params,
    route_arguments,
    route_summary,
)
from designcli.models import (
    ActionDefinition,
    APIDefinition,
    Attribute,
    AttributeSet,
    DataKind,
    ResourceDefinition,
    RouteDefinition,
)


def _api(action: ActionDefinition, base_path: str = "/api", resource_base: str = "/widgets") -> APIDefinition:
    return APIDefinition(
        name="widgets",
        base_path=base_path,
        resources=[
            ResourceDefinition(name="widget", base_path=resource_base, actions=[action])
        ],
    )


def _action(*paths: str, params: AttributeSet | None = None) -> ActionDefinition:
    return ActionDefinition(
        name="show",
        routes=[RouteDefinition(verb="GET", path=p) for p in paths],
        params=params or AttributeSet(),
    )


# ------------------------------------------------------------------ #
# full_path / extract_wildcards
# ------------------------------------------------------------------ #


class TestFullPath:
    def test_joins_all_base_paths(self) -> None:
        api = _api(_action("/:id"))
        action = api.resources[0].actions[0]
        assert full_path(api, action, action.routes[0]) == "/api/widgets/:id"

    def test_empty_route_path_keeps_resource_path(self) -> None:
        api = _api(_action(""))
        action = api.resources[0].actions[0]
        assert full_path(api, action, action.routes[0]) == "/api/widgets"

    def test_absolute_route_skips_base_paths(self) -> None:
        api = _api(_action("//health"))
        action = api.resources[0].actions[0]
        assert full_path(api, action, action.routes[0]) == "/health"

    def test_no_double_slashes(self) -> None:
        api = _api(_action("/:id"), base_path="/api/", resource_base="/widgets/")
        action = api.resources[0].actions[0]
        assert full_path(api, action, action.routes[0]) == "/api/widgets/:id"

    def test_relative_fragments_get_slashes(self) -> None:
        api = _api(_action("parts"), base_path="api", resource_base="widgets")
        action = api.resources[0].actions[0]
        assert full_path(api, action, action.routes[0]) == "/api/widgets/parts"


class TestExtractWildcards:
    def test_named_and_catch_all(self) -> None:
        assert extract_wildcards("/widgets/:id/files/*filepath") == ["id", "filepath"]

    def test_no_wildcards(self) -> None:
        assert extract_wildcards("/widgets") == []


# ------------------------------------------------------------------ #
# canonical route parameters
# ------------------------------------------------------------------ #


class TestDefaultRouteParams:
    def test_first_route_is_canonical(self) -> None:
        api = _api(_action("/:id", "/slug/:slug"))
        action = api.resources[0].actions[0]
        assert canonical_route(action).path == "/:id"
        assert default_route_params(api, action).names() == ["id"]

    def test_wildcard_order_follows_path(self) -> None:
        api = _api(_action("/:widgetId/parts/:partId"))
        params = default_route_params(api, api.resources[0].actions[0])
        assert params.names() == ["widgetId", "partId"]

    def test_every_wildcard_is_non_zero(self) -> None:
        api = _api(_action("/:widgetId/parts/:partId"))
        params = default_route_params(api, api.resources[0].actions[0])
        assert params.non_zero == ["widgetId", "partId"]

    def test_types_come_from_declared_params(self) -> None:
        declared = AttributeSet(
            attributes={"id": Attribute(type=DataKind.INTEGER)}, required=["id"]
        )
        api = _api(_action("/:id/parts/:part", params=declared))
        params = default_route_params(api, api.resources[0].actions[0])
        assert params.attributes["id"].type == DataKind.INTEGER
        assert params.attributes["part"].type == DataKind.STRING
        assert params.required == ["id"]

    def test_base_path_wildcards_included(self) -> None:
        api = _api(_action("/:id"), resource_base="/shelves/:shelfId/widgets")
        params = default_route_params(api, api.resources[0].actions[0])
        assert params.names() == ["shelfId", "id"]

    def test_no_route_raises(self) -> None:
        api = _api(_action())
        with pytest.raises(DefinitionError, match="no route declared"):
            default_route_params(api, api.resources[0].actions[0])

    def test_repeated_wildcard_raises(self) -> None:
        api = _api(_action("/:id/copy/:id"))
        with pytest.raises(DefinitionError, match="repeats wildcard"):
            default_route_params(api, api.resources[0].actions[0])

    def test_error_names_resource_and_action(self) -> None:
        api = _api(_action())
        with pytest.raises(DefinitionError) as exc_info:
            canonical_route(api.resources[0].actions[0])
        assert exc_info.value.resource == "widget"
        assert exc_info.value.action == "show"


# ------------------------------------------------------------------ #
# templates / arguments
# ------------------------------------------------------------------ #


class TestDefaultRouteTemplate:
    def test_wildcards_become_placeholders(self) -> None:
        api = _api(_action("/:widgetId/parts/*rest"))
        template = default_route_template(api, api.resources[0].actions[0])
        assert template == "/api/widgets/{}/parts/{}"

    def test_template_renders_with_arguments(self) -> None:
        api = _api(_action("/:widgetId/parts/:partId"))
        template = default_route_template(api, api.resources[0].actions[0])
        assert template.format("w1", 42) == "/api/widgets/w1/parts/42"

    def test_literal_braces_are_escaped(self) -> None:
        api = _api(_action("/{literal}/:id"))
        template = default_route_template(api, api.resources[0].actions[0])
        assert template.format(7) == "/api/widgets/{literal}/7"

    def test_no_wildcards(self) -> None:
        api = _api(_action(""))
        assert default_route_template(api, api.resources[0].actions[0]) == "/api/widgets"


class TestRouteArguments:
    def test_arguments_match_template_order(self) -> None:
        declared = AttributeSet(attributes={"partId": Attribute(type=DataKind.INTEGER)})
        api = _api(_action("/:widgetId/parts/:partId", params=declared))
        refs = route_arguments(api, api.resources[0].actions[0])
        assert [r.attr for r in refs] == ["widget_id", "part_id"]
        assert [r.annotation for r in refs] == ["str", "int"]
        assert all(r.location == "path" and r.non_zero for r in refs)


# ------------------------------------------------------------------ #
# summaries
# ------------------------------------------------------------------ #


class TestRouteSummary:
    def test_single_route(self) -> None:
        api = _api(_action("/:id"))
        assert route_summary(api, api.resources[0].actions[0]) == "/api/widgets/ID"

    def test_several_routes_are_alternated(self) -> None:
        api = _api(_action("/:id", "/slug/:slug"))
        summary = route_summary(api, api.resources[0].actions[0])
        assert summary == "(/api/widgets/ID|/api/widgets/slug/SLUG)"

    def test_catch_all_is_upper_cased(self) -> None:
        api = _api(_action("/files/*filepath"))
        assert route_summary(api, api.resources[0].actions[0]) == "/api/widgets/files/FILEPATH"

    def test_no_route_raises(self) -> None:
        api = _api(_action())
        with pytest.raises(DefinitionError):
            route_summary(api, api.resources[0].actions[0])

    def test_repeated_wildcard_in_later_route_raises(self) -> None:
        api = _api(_action("/:id", "//a/:x/b/:x"))
        with pytest.raises(DefinitionError, match="repeats wildcard"):
            route_summary(api, api.resources[0].actions[0])


# ------------------------------------------------------------------ #
# path / query split
# ------------------------------------------------------------------ #


class TestPathParamNames:
    def test_union_over_routes_in_first_seen_order(self) -> None:
        api = _api(_action("/:id", "/slug/:slug", "/:id/v/:version"))
        names = path_param_names(api, api.resources[0].actions[0])
        assert names == ["id", "slug", "version"]

    def test_base_path_wildcards_count(self) -> None:
        api = _api(_action("/:id"), resource_base="/shelves/:shelfId")
        assert path_param_names(api, api.resources[0].actions[0]) == ["shelfId", "id"]

    def test_absolute_route_skips_base_wildcards(self) -> None:
        api = _api(_action("//health/:probe"), resource_base="/shelves/:shelfId")
        assert path_param_names(api, api.resources[0].actions[0]) == ["probe"]

    def test_repeated_wildcard_in_any_route_raises(self) -> None:
        api = _api(_action("/books/:id", "//a/:x/b/:x"))
        with pytest.raises(DefinitionError, match="repeats wildcard"):
            path_param_names(api, api.resources[0].actions[0])


class TestQueryParams:
    def test_base_path_param_is_not_a_query_param(self) -> None:
        declared = AttributeSet(
            attributes={
                "shelfId": Attribute(type=DataKind.INTEGER),
                "id": Attribute(type=DataKind.INTEGER),
                "limit": Attribute(type=DataKind.INTEGER),
            },
            required=["shelfId", "limit"],
        )
        api = _api(_action("/:id", params=declared), resource_base="/shelves/:shelfId")
        query = query_params(api, api.resources[0].actions[0])
        assert query.names() == ["limit"]
        assert query.required == ["limit"]

    def test_wildcards_of_other_routes_are_excluded(self) -> None:
        declared = AttributeSet(attributes={"slug": Attribute(), "q": Attribute()})
        api = _api(_action("/:id", "/slug/:slug", params=declared))
        assert query_params(api, api.resources[0].actions[0]).names() == ["q"]
