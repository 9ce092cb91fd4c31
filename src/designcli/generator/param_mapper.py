"""Classify action parameters into call-argument lists and command flags.

Generated client functions take their parameters *positionally*, so both
the function signature and every call site must agree on one ordering.
:func:`join_parameter_list` defines it:

1. Names are sorted lexically inside each attribute set, which keeps
   output identical across runs.
2. The required parameters of every set are emitted first, sets taken
   left to right.
3. The optional parameters of every set follow, in the same order.
4. Optional scalars that are not guaranteed a value are marked
   ``nullable``: the generated code passes ``None`` for "absent", so an
   absent value can be told apart from an explicit zero.

The rest of the module maps attributes to command options
(:func:`build_flag`, :func:`build_payload_flags`), converts names to valid
Python identifiers (:func:`sanitize_param_name`), and checks that an
action's parameters do not collide once sanitised
(:func:`check_collisions`).
"""

from __future__ import annotations

import json
import keyword
import re
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from designcli.exceptions import DefinitionError
from designcli.models import ActionDefinition, Attribute, AttributeSet, DataKind


# ---------------------------------------------------------------------------
# Type mapping
# ---------------------------------------------------------------------------

_TYPE_MAP: dict[DataKind, type] = {
    DataKind.BOOLEAN: bool,
    DataKind.INTEGER: int,
    DataKind.NUMBER: float,
    DataKind.STRING: str,
    DataKind.DATETIME: str,
    DataKind.UUID: str,
    DataKind.ANY: str,  # Passed through as raw text
    DataKind.HASH: str,  # Serialised as JSON string
    DataKind.OBJECT: str,  # Serialised as JSON string
    DataKind.FILE: str,
}

_ZERO_VALUES: dict[type, Any] = {bool: False, int: 0, float: 0.0, str: ""}

RESERVED_NAMES = frozenset(
    {
        "client",
        "ctx",
        "headers",
        "params",
        "path",
        "payload",
        "content_type",
        "pretty_print",
        "self",
    }
)
"""Identifiers used by generated code itself; parameters may not take them."""

RESERVED_FLAGS = frozenset({"--help", "--pp"})
"""Flags every generated sub-command declares."""


def kind_to_python(kind: DataKind) -> type:
    """Map a scalar :class:`~designcli.models.DataKind` to a Python type.

    Non-scalar kinds other than arrays (hashes, objects) map to ``str``
    since they travel on the command line as JSON text.

    Example::

        >>> kind_to_python(DataKind.INTEGER)
        <class 'int'>
        >>> kind_to_python(DataKind.UUID)
        <class 'str'>
    """
    return _TYPE_MAP.get(kind, str)


def python_type_name(attribute: Attribute, nullable: bool = False) -> str:
    """Return the annotation text used for *attribute* in generated code.

    Arrays become ``Optional[list[T]]`` (Typer collects repeated flags into
    a list). Nullable scalars are wrapped in ``Optional[...]``.
    """
    if attribute.is_array:
        element = kind_to_python(attribute.element_type or DataKind.STRING)
        return f"Optional[list[{element.__name__}]]"
    name = kind_to_python(attribute.type).__name__
    if nullable:
        return f"Optional[{name}]"
    return name


def zero_value(attribute: Attribute) -> Any:
    """Return the zero value of *attribute*'s kind (``None`` for arrays)."""
    if attribute.is_array:
        return None
    return _ZERO_VALUES[kind_to_python(attribute.type)]


# ---------------------------------------------------------------------------
# Name sanitisation
# ---------------------------------------------------------------------------

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def sanitize_param_name(name: str) -> str:
    """Convert a parameter name to a valid Python identifier.

    CamelCase boundaries become underscores and the result is lowercased.
    Separators and invalid characters become single underscores. A leading
    digit gets an underscore prefix, and Python keywords get a trailing
    underscore.

    Example::

        >>> sanitize_param_name("partId")
        'part_id'
        >>> sanitize_param_name("X-Request-ID")
        'x_request_id'
        >>> sanitize_param_name("from")
        'from_'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = result.lower()
    result = result.replace("-", "_").replace(".", "_")
    result = _INVALID_IDENT_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class FieldRef(BaseModel):
    """A reference to one command field, as used in argument lists.

    Attributes:
        name: Original parameter name (query key, header name, wildcard).
        attr: Python identifier of the command field / function parameter.
        kind: Data kind of the parameter.
        required: Whether the definition marks the parameter required.
        non_zero: Whether the parameter always carries a value.
        nullable: Whether ``None`` is passed when the parameter is absent.
        location: ``"path"``, ``"query"`` or ``"header"`` when known.
        annotation: Annotation of the generated function parameter.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    attr: str
    kind: DataKind = DataKind.STRING
    required: bool = False
    non_zero: bool = False
    nullable: bool = False
    location: Optional[str] = None
    annotation: str = "str"

    @property
    def is_array(self) -> bool:
        return self.kind == DataKind.ARRAY


def join_parameter_list(
    *attribute_sets: Optional[AttributeSet],
    locations: Sequence[Optional[str]] = (),
) -> list[FieldRef]:
    """Build the ordered argument list for the given attribute sets.

    All required parameters come first, then all optional ones. Sets are
    taken in argument order, and names are sorted lexically within each set.
    ``None`` sets are skipped.

    Args:
        *attribute_sets: Parameter groups, e.g. query params then headers.
        locations: Optional location label per set, copied onto each
            :class:`FieldRef`.

    Returns:
        The field references in call order.

    Example::

        >>> refs = join_parameter_list(AttributeSet(
        ...     attributes={n: Attribute() for n in "bdac"}, required=["b", "a"]))
        >>> [r.name for r in refs]
        ['a', 'b', 'c', 'd']
    """
    required: list[FieldRef] = []
    optional: list[FieldRef] = []

    for idx, att in enumerate(attribute_sets):
        if att is None:
            continue
        location = locations[idx] if idx < len(locations) else None
        for name in sorted(att.attributes):
            attribute = att.attributes[name]
            is_required = att.is_required(name)
            is_non_zero = att.is_non_zero(name)
            nullable = not attribute.is_array and not is_required and not is_non_zero
            ref = FieldRef(
                name=name,
                attr=sanitize_param_name(name),
                kind=attribute.type,
                required=is_required,
                non_zero=is_non_zero,
                nullable=nullable,
                location=location,
                annotation=python_type_name(attribute, nullable=nullable),
            )
            if is_required:
                required.append(ref)
            else:
                optional.append(ref)

    return required + optional


def join_names(*attribute_sets: Optional[AttributeSet], prefix: str = "self.") -> str:
    """Render :func:`join_parameter_list` as a comma-separated argument string."""
    return ", ".join(f"{prefix}{ref.attr}" for ref in join_parameter_list(*attribute_sets))


# ---------------------------------------------------------------------------
# Flags
# ---------------------------------------------------------------------------


class FlagSpec(BaseModel):
    """One ``--option`` of a generated command.

    ``field_default`` is the Python expression used for the command
    dataclass field; ``option_default`` is the one handed to
    ``typer.Option`` (``...`` for flags Typer must enforce). Flags with
    ``choices`` are annotated with the generated enum ``choice_class``
    so Typer rejects other values; its ``.value`` reaches the request.
    """

    model_config = ConfigDict(frozen=True)

    attr: str
    flag: str
    annotation: str
    field_default: str
    option_default: str
    help: str = ""
    location: Optional[str] = None
    choices: Optional[list[str]] = None
    choice_class: Optional[str] = None

    @property
    def option_annotation(self) -> str:
        """Annotation of the Typer parameter, the enum class for choice flags."""
        if self.choice_class is None:
            return self.annotation
        if self.annotation.startswith("Optional["):
            return f"Optional[{self.choice_class}]"
        return self.choice_class

    @property
    def choice_members(self) -> list[tuple[str, str]]:
        """``(member name, value)`` pairs of the generated enum class."""
        members: list[tuple[str, str]] = []
        taken: set[str] = set()
        for value in self.choices or []:
            name = re.sub(r"[^0-9A-Za-z]+", "_", value).strip("_").upper()
            if not name or name[0].isdigit():
                name = f"V_{name}"
            candidate, n = name, 2
            while candidate in taken:
                candidate, n = f"{name}_{n}", n + 1
            taken.add(candidate)
            members.append((candidate, value))
        return members


def build_flag(
    name: str,
    attribute: Attribute,
    *,
    required: bool = False,
    nullable: bool = False,
    location: Optional[str] = None,
) -> FlagSpec:
    """Map one parameter to a :class:`FlagSpec`.

    Declared defaults win. Otherwise nullable and array flags default to
    ``None`` and the rest to their kind's zero value. Required flags
    without a declared default become mandatory options. Path flags never
    do, since the request path may be given positionally instead.
    """
    help_text = attribute.description or ""
    if attribute.enum_values:
        choices = ", ".join(str(v) for v in attribute.enum_values)
        enum_hint = f"[choices: {choices}]"
        help_text = f"{help_text}  {enum_hint}" if help_text else enum_hint

    if attribute.default is not None:
        field_default = option_default = _default_expr(attribute)
        if attribute.is_array:
            # Dataclass fields cannot default to a list.
            field_default = "None"
    elif nullable:
        field_default = option_default = "None"
    else:
        field_default = option_default = repr(zero_value(attribute))

    if required and attribute.default is None and location != "path":
        option_default = "..."

    return FlagSpec(
        attr=sanitize_param_name(name),
        flag=f"--{name}",
        annotation=python_type_name(attribute, nullable=nullable),
        field_default=field_default,
        option_default=option_default,
        help=help_text,
        location=location,
        choices=_string_choices(attribute) if option_default != repr("") else None,
    )


def _string_choices(attribute: Attribute) -> Optional[list[str]]:
    """Enum values of a string attribute, checked by the generated option."""
    if attribute.type != DataKind.STRING or not attribute.enum_values:
        return None
    return [str(v) for v in attribute.enum_values]


def _default_expr(attribute: Attribute) -> str:
    """Render a declared default as a Python expression of the flag's type."""
    default = attribute.default
    if attribute.is_array:
        values = default if isinstance(default, list) else [default]
        return repr(list(values))
    if attribute.type in (DataKind.HASH, DataKind.OBJECT) and not isinstance(default, str):
        return repr(json.dumps(default, sort_keys=True))
    return repr(default)


def build_payload_flags() -> list[FlagSpec]:
    """Return the ``--payload`` and ``--content`` flags of actions with a body."""
    return [
        FlagSpec(
            attr="payload",
            flag="--payload",
            annotation="str",
            field_default="''",
            option_default="''",
            help="Request body encoded in JSON",
        ),
        FlagSpec(
            attr="content_type",
            flag="--content",
            annotation="str",
            field_default="''",
            option_default="''",
            help="Request content type override, e.g. 'application/x-www-form-urlencoded'",
        ),
    ]


def check_collisions(action: ActionDefinition, path_names: Sequence[str] = ()) -> None:
    """Ensure the parameters of *action* map to distinct field names.

    Path params, query params and headers share one namespace in the
    generated command, together with :data:`RESERVED_NAMES`. *path_names*
    are the wildcards of the action's full route paths, base paths
    included; declared params of the same name are the same field.

    Raises:
        DefinitionError: If two names sanitise to the same identifier or a
            name takes a reserved identifier.
    """
    names = list(path_names)
    names += [n for n in action.params.attributes if n not in names]
    names += list(action.headers.attributes)

    taken_flags = set(RESERVED_FLAGS)
    if action.payload is not None:
        taken_flags.update(flag.flag for flag in build_payload_flags())

    seen: dict[str, str] = {}
    for name in names:
        attr = sanitize_param_name(name)
        if f"--{name}" in taken_flags:
            raise DefinitionError(
                f"parameter '{name}' collides with built-in flag '--{name}'",
                resource=action.resource,
                action=action.name,
            )
        if attr in RESERVED_NAMES:
            raise DefinitionError(
                f"parameter '{name}' collides with reserved field '{attr}'",
                resource=action.resource,
                action=action.name,
            )
        if attr in seen:
            raise DefinitionError(
                f"parameters '{seen[attr]}' and '{name}' both map to field '{attr}'",
                resource=action.resource,
                action=action.name,
            )
        seen[attr] = name
