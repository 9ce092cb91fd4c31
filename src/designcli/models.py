"""Canonical Pydantic models shared across all designcli modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in a project-local ``designcli.json``:
    :class:`OutputConfig`, :class:`GenerateConfig`, and :class:`GlobalConfig`.

**Definition models** -- the immutable graph describing an API, produced by
:func:`~designcli.parser.extractor.extract_definition` and consumed by the
generator:
    :class:`DataKind`, :class:`Attribute`, :class:`AttributeSet`,
    :class:`RouteDefinition`, :class:`ActionDefinition`,
    :class:`FileServerDefinition`, :class:`ResourceDefinition`,
    :class:`SecuritySchemeDefinition`, and :class:`APIDefinition`.

Definition models are frozen. Parent relations (action -> resource) are
stored as handles, i.e. the parent's name, and resolved through
:meth:`APIDefinition.resource` rather than held as object references.
Traversal goes through lazy generators (``iter_*``) that preserve
declaration order; an exception raised while a caller consumes them stops
the walk and propagates unchanged.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Iterator, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


WILDCARD_RE = re.compile(r"/(?::|\*)([a-zA-Z0-9_]+)")
"""Matches a wildcard segment (``/:id`` or ``/*filepath``); group 1 is the name."""


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GenerateConfig(BaseModel):
    """Settings for ``designcli generate``.

    Every field can be set in the global config, the project config, an
    environment variable or a CLI flag; see
    :func:`~designcli.config.resolve_generate_config`.
    """

    output_dir: str = Field(
        default=".", description="Directory the client package is written into"
    )
    package: Optional[str] = Field(
        default=None, description="Python package name of the generated client"
    )
    cli_name: Optional[str] = Field(
        default=None, description="Console name of the generated client"
    )
    timeout: float = Field(
        default=20.0, description="Default request timeout of the generated client"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/designcli/config.json``."""

    output: OutputConfig = Field(default_factory=OutputConfig)
    generate: GenerateConfig = Field(default_factory=GenerateConfig)


# --- Definition model ---


class DataKind(str, enum.Enum):
    """Data kinds an attribute can carry."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    DATETIME = "datetime"
    UUID = "uuid"
    ANY = "any"
    ARRAY = "array"
    HASH = "hash"
    OBJECT = "object"
    FILE = "file"


class Attribute(BaseModel):
    """A single typed attribute: a parameter, a header or a payload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: DataKind = DataKind.STRING
    element_type: Optional[DataKind] = Field(
        default=None, description="Element kind when type is array"
    )
    description: Optional[str] = None
    default: Any = None
    enum_values: Optional[list[Any]] = Field(default=None, alias="enum")

    @property
    def is_array(self) -> bool:
        return self.type == DataKind.ARRAY


class AttributeSet(BaseModel):
    """An ordered group of named attributes with requiredness metadata.

    ``non_zero`` lists attributes that always hold a value even when not
    required, e.g. route wildcards which are always interpolated.
    """

    model_config = ConfigDict(frozen=True)

    attributes: dict[str, Attribute] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    non_zero: list[str] = Field(default_factory=list)

    def is_required(self, name: str) -> bool:
        return name in self.required

    def is_non_zero(self, name: str) -> bool:
        return name in self.non_zero

    def names(self) -> list[str]:
        return list(self.attributes)

    def __bool__(self) -> bool:
        return bool(self.attributes)


class RouteDefinition(BaseModel):
    """An HTTP verb and a path pattern with zero or more wildcard segments."""

    model_config = ConfigDict(frozen=True)

    verb: str = "GET"
    path: str = ""

    @field_validator("verb")
    @classmethod
    def _upper_verb(cls, value: str) -> str:
        return value.upper()

    @property
    def is_absolute(self) -> bool:
        """Absolute routes (``//...``) ignore the API and resource base paths."""
        return self.path.startswith("//")


class ActionDefinition(BaseModel):
    """One operation on a resource, reachable through one or more routes.

    The first route is the *canonical* route used to build the default
    request path; order in ``routes`` is significant.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    resource: str = Field(default="", description="Name of the parent resource")
    routes: list[RouteDefinition] = Field(default_factory=list)
    payload: Optional[Attribute] = None
    params: AttributeSet = Field(default_factory=AttributeSet)
    headers: AttributeSet = Field(default_factory=AttributeSet)
    websocket: bool = False
    security: Optional[str] = Field(
        default=None, description="Security scheme name overriding the resource/API default"
    )


class FileServerDefinition(BaseModel):
    """A static file (or directory) exposed under a request path.

    A request path ending in a wildcard (``/assets/*filepath``) serves a
    whole directory; anything else serves the single file at ``file_path``.
    """

    model_config = ConfigDict(frozen=True)

    request_path: str
    file_path: str

    @property
    def is_dir(self) -> bool:
        return bool(WILDCARD_RE.findall(self.request_path))


class ResourceDefinition(BaseModel):
    """A named group of actions and file servers."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    base_path: str = ""
    actions: list[ActionDefinition] = Field(default_factory=list)
    file_servers: list[FileServerDefinition] = Field(default_factory=list)
    security: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _bind_actions(cls, data: Any) -> Any:
        """Point every action's ``resource`` handle at this resource."""
        if not isinstance(data, dict) or "name" not in data:
            return data
        bound = []
        for action in data.get("actions") or []:
            if isinstance(action, ActionDefinition):
                action = action.model_copy(update={"resource": data["name"]})
            elif isinstance(action, dict):
                action = {**action, "resource": data["name"]}
            bound.append(action)
        return {**data, "actions": bound}

    def iter_actions(self) -> Iterator[ActionDefinition]:
        """Yield actions in declaration order."""
        yield from self.actions

    def iter_file_servers(self) -> Iterator[FileServerDefinition]:
        """Yield file servers in declaration order."""
        yield from self.file_servers


class SecuritySchemeDefinition(BaseModel):
    """A security scheme declared by the API.

    ``type`` is kept as a free string: ``basic``, ``apiKey``, ``jwt`` and
    ``oauth2`` are understood by the signer registry, anything else is
    carried along and ignored there.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: str
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, alias="in")  # query, header
    key_name: Optional[str] = None


class APIDefinition(BaseModel):
    """Root of the definition graph.

    Example::

        api = APIDefinition(
            name="shelf",
            host="shelf.example.com",
            resources=[
                ResourceDefinition(
                    name="book",
                    actions=[
                        ActionDefinition(
                            name="show",
                            routes=[RouteDefinition(verb="GET", path="/books/:id")],
                        )
                    ],
                )
            ],
        )
    """

    model_config = ConfigDict(frozen=True)

    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    host: str = "localhost"
    scheme: str = "http"
    version: str = ""
    base_path: str = ""
    resources: list[ResourceDefinition] = Field(default_factory=list)
    security_schemes: list[SecuritySchemeDefinition] = Field(default_factory=list)
    security: Optional[str] = Field(
        default=None, description="Default security scheme name"
    )

    def iter_resources(self) -> Iterator[ResourceDefinition]:
        """Yield resources in declaration order."""
        yield from self.resources

    def iter_actions(self) -> Iterator[tuple[ResourceDefinition, ActionDefinition]]:
        """Yield ``(resource, action)`` pairs, resources first, then their actions."""
        for resource in self.iter_resources():
            for action in resource.iter_actions():
                yield resource, action

    def resource(self, name: str) -> Optional[ResourceDefinition]:
        """Look up a resource by name."""
        for res in self.resources:
            if res.name == name:
                return res
        return None

    def parent_of(self, action: ActionDefinition) -> ResourceDefinition:
        """Resolve the parent resource handle of *action*.

        Raises:
            KeyError: If the handle does not name a resource of this API.
        """
        res = self.resource(action.resource)
        if res is None:
            raise KeyError(action.resource)
        return res

    def security_scheme(self, name: str) -> Optional[SecuritySchemeDefinition]:
        """Look up a security scheme by name."""
        for scheme in self.security_schemes:
            if scheme.name == name:
                return scheme
        return None
