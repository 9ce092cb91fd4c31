"""Tests for designcli.generator.param_mapper.

Covers:
- Data kind -> Python type mapping and annotation text
- sanitize_param_name: camelCase, kebab-case, dots, keywords, digits
- join_parameter_list ordering (required first, lexical inside each set)
- Nullable marking of optional scalars
- build_flag defaults (declared, nullable, zero, mandatory)
- Enum choices and the members of their generated enum class
- check_collisions on sanitised and reserved names
"""

from __future__ import annotations

import pytest

from designcli.exceptions import DefinitionError
from designcli.generator.param_mapper import (
    build_flag,
    build_payload_flags,
    check_collisions,
    join_names,
    join_parameter_list,
    kind_to_python,
    python_type_name,
    sanitize_param_name,
    zero_value,
)
from designcli.models import (
    ActionDefinition,
    Attribute,
    AttributeSet,
    DataKind,
    RouteDefinition,
)


# ------------------------------------------------------------------ #
# Type mapping
# ------------------------------------------------------------------ #


class TestKindToPython:
    def test_integer(self) -> None:
        assert kind_to_python(DataKind.INTEGER) is int

    def test_number(self) -> None:
        assert kind_to_python(DataKind.NUMBER) is float

    def test_boolean(self) -> None:
        assert kind_to_python(DataKind.BOOLEAN) is bool

    def test_uuid_is_text(self) -> None:
        assert kind_to_python(DataKind.UUID) is str

    def test_hash_is_json_text(self) -> None:
        """Hashes travel on the command line as JSON strings."""
        assert kind_to_python(DataKind.HASH) is str


class TestPythonTypeName:
    def test_scalar(self) -> None:
        assert python_type_name(Attribute(type=DataKind.INTEGER)) == "int"

    def test_nullable_scalar(self) -> None:
        assert python_type_name(Attribute(type=DataKind.NUMBER), nullable=True) == "Optional[float]"

    def test_array_of_integers(self) -> None:
        attr = Attribute(type=DataKind.ARRAY, element_type=DataKind.INTEGER)
        assert python_type_name(attr) == "Optional[list[int]]"

    def test_array_defaults_to_strings(self) -> None:
        assert python_type_name(Attribute(type=DataKind.ARRAY)) == "Optional[list[str]]"


class TestZeroValue:
    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (DataKind.BOOLEAN, False),
            (DataKind.INTEGER, 0),
            (DataKind.NUMBER, 0.0),
            (DataKind.STRING, ""),
        ],
    )
    def test_scalars(self, kind: DataKind, expected: object) -> None:
        assert zero_value(Attribute(type=kind)) == expected

    def test_array_is_none(self) -> None:
        assert zero_value(Attribute(type=DataKind.ARRAY)) is None


# ------------------------------------------------------------------ #
# sanitize_param_name
# ------------------------------------------------------------------ #


class TestSanitizeParamName:
    def test_camel_case(self) -> None:
        assert sanitize_param_name("partId") == "part_id"

    def test_acronym(self) -> None:
        assert sanitize_param_name("X-Request-ID") == "x_request_id"

    def test_dots(self) -> None:
        assert sanitize_param_name("page.size") == "page_size"

    def test_keyword(self) -> None:
        assert sanitize_param_name("from") == "from_"

    def test_leading_digit(self) -> None:
        assert sanitize_param_name("2fa") == "_2fa"

    def test_only_symbols(self) -> None:
        assert sanitize_param_name("$$") == "param"

    def test_already_valid(self) -> None:
        assert sanitize_param_name("limit") == "limit"


# ------------------------------------------------------------------ #
# join_parameter_list
# ------------------------------------------------------------------ #


def _set(*names: str, required: tuple[str, ...] = (), kinds: dict[str, DataKind] | None = None) -> AttributeSet:
    kinds = kinds or {}
    return AttributeSet(
        attributes={n: Attribute(type=kinds.get(n, DataKind.STRING)) for n in names},
        required=list(required),
    )


class TestJoinParameterList:
    def test_required_first_then_lexical(self) -> None:
        refs = join_parameter_list(_set("b", "d", "a", "c", required=("b", "a")))
        assert [r.name for r in refs] == ["a", "b", "c", "d"]

    def test_required_of_every_set_precede_optionals(self) -> None:
        query = _set("zeta", "alpha", required=("zeta",))
        headers = _set("X-Trace", "X-Auth", required=("X-Auth",))
        refs = join_parameter_list(query, headers, locations=("query", "header"))
        assert [r.name for r in refs] == ["zeta", "X-Auth", "alpha", "X-Trace"]
        assert [r.location for r in refs] == ["query", "header", "query", "header"]

    def test_declaration_order_is_irrelevant(self) -> None:
        forward = join_parameter_list(_set("a", "b", "c"))
        backward = join_parameter_list(_set("c", "b", "a"))
        assert [r.name for r in forward] == [r.name for r in backward]

    def test_none_sets_are_skipped(self) -> None:
        refs = join_parameter_list(None, _set("a"))
        assert [r.name for r in refs] == ["a"]

    def test_optional_scalars_are_nullable(self) -> None:
        refs = join_parameter_list(_set("limit", "id", required=("id",), kinds={"limit": DataKind.INTEGER}))
        by_name = {r.name: r for r in refs}
        assert by_name["limit"].nullable is True
        assert by_name["limit"].annotation == "Optional[int]"
        assert by_name["id"].nullable is False
        assert by_name["id"].annotation == "str"

    def test_arrays_are_never_nullable(self) -> None:
        refs = join_parameter_list(_set("tags", kinds={"tags": DataKind.ARRAY}))
        assert refs[0].nullable is False
        assert refs[0].is_array

    def test_non_zero_params_are_not_nullable(self) -> None:
        attrs = AttributeSet(attributes={"id": Attribute()}, non_zero=["id"])
        assert join_parameter_list(attrs)[0].nullable is False

    def test_join_names(self) -> None:
        assert join_names(_set("b", "a")) == "self.a, self.b"


# ------------------------------------------------------------------ #
# build_flag
# ------------------------------------------------------------------ #


class TestBuildFlag:
    def test_declared_default_wins(self) -> None:
        flag = build_flag("sort", Attribute(default="title"), nullable=True)
        assert flag.field_default == "'title'"
        assert flag.option_default == "'title'"
        assert flag.annotation == "Optional[str]"

    def test_nullable_defaults_to_none(self) -> None:
        flag = build_flag("limit", Attribute(type=DataKind.INTEGER), nullable=True)
        assert flag.field_default == "None"

    def test_zero_value_default(self) -> None:
        flag = build_flag("id", Attribute(type=DataKind.INTEGER), location="path")
        assert flag.field_default == "0"
        assert flag.option_default == "0"

    def test_required_query_flag_is_mandatory(self) -> None:
        flag = build_flag("q", Attribute(), required=True, location="query")
        assert flag.option_default == "..."
        assert flag.field_default == "''"

    def test_required_path_flag_is_not_mandatory(self) -> None:
        """The path may be passed positionally instead of through flags."""
        flag = build_flag("id", Attribute(), required=True, location="path")
        assert flag.option_default == "''"

    def test_array_default(self) -> None:
        attr = Attribute(type=DataKind.ARRAY, default=["a", "b"])
        flag = build_flag("tags", attr)
        assert flag.option_default == "['a', 'b']"
        assert flag.field_default == "None"

    def test_hash_default_is_json_text(self) -> None:
        flag = build_flag("filter", Attribute(type=DataKind.HASH, default={"b": 1, "a": 2}))
        assert flag.option_default == repr('{"a": 2, "b": 1}')

    def test_flag_keeps_original_name(self) -> None:
        flag = build_flag("X-Request-ID", Attribute(), nullable=True, location="header")
        assert flag.flag == "--X-Request-ID"
        assert flag.attr == "x_request_id"

    def test_enum_choices_in_help(self) -> None:
        flag = build_flag("sort", Attribute(description="Sort key", enum=["title", "author"]))
        assert flag.help == "Sort key  [choices: title, author]"

    def test_string_enum_choices(self) -> None:
        flag = build_flag("sort", Attribute(enum=["title", "author"], default="title"))
        assert flag.choices == ["title", "author"]

    def test_nullable_enum_choices(self) -> None:
        flag = build_flag("sort", Attribute(enum=["title", "author"]), nullable=True)
        assert flag.choices == ["title", "author"]

    def test_no_choices_for_empty_default(self) -> None:
        assert build_flag("sort", Attribute(enum=["title", "author"])).choices is None

    def test_no_choices_for_integer_enum(self) -> None:
        flag = build_flag("level", Attribute(type=DataKind.INTEGER, enum=[1, 2]), nullable=True)
        assert flag.choices is None

    def test_choice_members_are_identifiers(self) -> None:
        flag = build_flag("sort", Attribute(enum=["title", "due-date", "due_date", "2x", "-"], default="title"))
        assert flag.choice_members == [
            ("TITLE", "title"),
            ("DUE_DATE", "due-date"),
            ("DUE_DATE_2", "due_date"),
            ("V_2X", "2x"),
            ("V_", "-"),
        ]

    def test_option_annotation_uses_choice_class(self) -> None:
        flag = build_flag("sort", Attribute(enum=["title", "author"]), nullable=True)
        assert flag.option_annotation == "Optional[str]"
        named = flag.model_copy(update={"choice_class": "ListBookSortChoice"})
        assert named.option_annotation == "Optional[ListBookSortChoice]"
        assert named.annotation == "Optional[str]"

    def test_required_choice_annotation(self) -> None:
        flag = build_flag("sort", Attribute(enum=["title"], default="title"), required=True)
        named = flag.model_copy(update={"choice_class": "SortChoice"})
        assert named.option_annotation == "SortChoice"

    def test_payload_flags(self) -> None:
        assert [f.flag for f in build_payload_flags()] == ["--payload", "--content"]


# ------------------------------------------------------------------ #
# check_collisions
# ------------------------------------------------------------------ #


def _action(params: AttributeSet, headers: AttributeSet | None = None, path: str = "/:id", payload: bool = False) -> ActionDefinition:
    return ActionDefinition(
        name="show",
        resource="widget",
        routes=[RouteDefinition(path=path)],
        params=params,
        headers=headers or AttributeSet(),
        payload=Attribute(type=DataKind.OBJECT) if payload else None,
    )


class TestCheckCollisions:
    def test_distinct_names_pass(self) -> None:
        check_collisions(_action(_set("id", "limit"), _set("X-Trace")))

    def test_sanitised_clash(self) -> None:
        with pytest.raises(DefinitionError, match="both map to field 'page_size'"):
            check_collisions(_action(_set("pageSize", "page-size")))

    def test_query_and_header_clash(self) -> None:
        with pytest.raises(DefinitionError, match="request_id"):
            check_collisions(_action(_set("request_id"), _set("Request-Id")))

    def test_declared_path_param_is_one_field(self) -> None:
        check_collisions(_action(_set("shelfId", "id")), path_names=["shelfId", "id"])

    def test_path_wildcard_clashes_with_header(self) -> None:
        with pytest.raises(DefinitionError, match="both map to field 'shelf_id'"):
            check_collisions(_action(_set(), _set("Shelf-Id")), path_names=["shelfId"])

    def test_reserved_name(self) -> None:
        with pytest.raises(DefinitionError, match="reserved field 'headers'"):
            check_collisions(_action(_set("headers")))

    def test_builtin_flag(self) -> None:
        with pytest.raises(DefinitionError, match="built-in flag '--pp'"):
            check_collisions(_action(_set("pp")))

    def test_content_flag_only_reserved_with_payload(self) -> None:
        check_collisions(_action(_set("content")))
        with pytest.raises(DefinitionError, match="--content"):
            check_collisions(_action(_set("content"), payload=True))

    def test_error_carries_location(self) -> None:
        with pytest.raises(DefinitionError) as exc_info:
            check_collisions(_action(_set("path")))
        assert exc_info.value.resource == "widget"
        assert exc_info.value.action == "show"
