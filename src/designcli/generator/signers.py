"""Security signer registry.

Each security scheme of an API is resolved once into a :class:`SignerSpec`.
This tagged variant carries everything the emitter needs for that scheme:
the signer factory signature, the arguments passed to it, the global flags
that feed those arguments, and the runtime signer class to build.

Supported variants (factory arguments, then the global flags feeding them):

* ``basic`` -- ``user, password`` from ``--user`` and ``--pass``.
* ``apiKey`` -- ``key, fmt`` from ``--key`` and ``--format``.
* ``jwt`` and ``oauth2`` -- ``source``, a token source built from the
  shared ``--token`` and ``--token-type`` flags.

Any other scheme type resolves to ``None``. Not every authentication scheme
needs CLI support, so unsupported schemes are skipped with a debug log
message and never raise.
"""

from __future__ import annotations

import enum
import logging
import re
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from designcli.models import SecuritySchemeDefinition

logger = logging.getLogger(__name__)


class SignerKind(str, enum.Enum):
    """Security scheme variants that get a generated signer."""

    BASIC = "basic"
    API_KEY = "apiKey"
    JWT = "jwt"
    OAUTH2 = "oauth2"


class SignerParam(BaseModel):
    """One parameter of a signer factory function."""

    model_config = ConfigDict(frozen=True)

    name: str
    annotation: str


class CredentialFlag(BaseModel):
    """A global credential flag declared by the generated client."""

    model_config = ConfigDict(frozen=True)

    attr: str
    flag: str
    default: str = ""
    help: str = ""


class SignerSpec(BaseModel):
    """Resolved signer metadata for a single security scheme."""

    model_config = ConfigDict(frozen=True)

    kind: SignerKind
    scheme_name: str
    signer_class: str
    params: tuple[SignerParam, ...] = ()
    flags: tuple[CredentialFlag, ...] = ()
    sign_query: bool = False
    key_name: Optional[str] = None
    description: Optional[str] = None

    @property
    def signature(self) -> str:
        """Factory signature, e.g. ``user: str, password: str``."""
        return ", ".join(f"{p.name}: {p.annotation}" for p in self.params)

    @property
    def call_args(self) -> str:
        """Arguments passed to the factory, e.g. ``user, password``."""
        return ", ".join(p.name for p in self.params)

    @property
    def factory_name(self) -> str:
        """Name of the generated factory function."""
        return f"new_{_identifier(self.scheme_name)}_signer"


_BASIC_FLAGS = (
    CredentialFlag(attr="user", flag="--user", help="Username used for authentication"),
    CredentialFlag(attr="password", flag="--pass", help="Password used for authentication"),
)
_API_KEY_FLAGS = (
    CredentialFlag(attr="key", flag="--key", help="API key used for authentication"),
    CredentialFlag(
        attr="fmt",
        flag="--format",
        default="Bearer %s",
        help="Format used to create auth header or query from key",
    ),
)
_TOKEN_FLAGS = (
    CredentialFlag(attr="token", flag="--token", help="Token used for authentication"),
    CredentialFlag(
        attr="token_type",
        flag="--token-type",
        default="Bearer",
        help="Token type used for authentication",
    ),
)
_TOKEN_PARAMS = (SignerParam(name="source", annotation="TokenSource"),)


def resolve_signer(scheme: SecuritySchemeDefinition) -> Optional[SignerSpec]:
    """Resolve *scheme* into a :class:`SignerSpec`.

    Returns:
        The signer variant, or ``None`` when the scheme type has no signer support.
    """
    try:
        kind = SignerKind(scheme.type)
    except ValueError:
        logger.debug(
            "Skipping security scheme %r: unsupported type %r", scheme.name, scheme.type
        )
        return None

    common = {"kind": kind, "scheme_name": scheme.name, "description": scheme.description}
    if kind == SignerKind.BASIC:
        return SignerSpec(
            **common,
            signer_class="BasicSigner",
            params=(
                SignerParam(name="user", annotation="str"),
                SignerParam(name="password", annotation="str"),
            ),
            flags=_BASIC_FLAGS,
        )
    if kind == SignerKind.API_KEY:
        return SignerSpec(
            **common,
            signer_class="APIKeySigner",
            params=(
                SignerParam(name="key", annotation="str"),
                SignerParam(name="fmt", annotation="str"),
            ),
            flags=_API_KEY_FLAGS,
            sign_query=scheme.location == "query",
            key_name=scheme.key_name or "Authorization",
        )
    signer_class = "JWTSigner" if kind == SignerKind.JWT else "OAuth2Signer"
    return SignerSpec(
        **common, signer_class=signer_class, params=_TOKEN_PARAMS, flags=_TOKEN_FLAGS
    )


class SignerSummary(BaseModel):
    """Signers of an API plus the aggregate flags guarding emission blocks."""

    model_config = ConfigDict(frozen=True)

    signers: list[SignerSpec] = Field(default_factory=list)
    has_signers: bool = False
    has_basic_auth: bool = False
    has_api_key: bool = False
    has_token: bool = False

    def credential_flags(self) -> list[CredentialFlag]:
        """Return the global credential flags to declare, without duplicates."""
        flags: list[CredentialFlag] = []
        if self.has_basic_auth:
            flags.extend(_BASIC_FLAGS)
        if self.has_api_key:
            flags.extend(_API_KEY_FLAGS)
        if self.has_token:
            flags.extend(_TOKEN_FLAGS)
        return flags

    def get(self, scheme_name: str) -> Optional[SignerSpec]:
        for spec in self.signers:
            if spec.scheme_name == scheme_name:
                return spec
        return None


def summarize_signers(schemes: Iterable[SecuritySchemeDefinition]) -> SignerSummary:
    """Resolve every scheme once and derive the aggregate flags.

    Unsupported schemes are excluded from both the signer list and every
    aggregate flag.
    """
    signers = [spec for spec in (resolve_signer(s) for s in schemes) if spec is not None]
    kinds = {spec.kind for spec in signers}
    return SignerSummary(
        signers=signers,
        has_signers=bool(signers),
        has_basic_auth=SignerKind.BASIC in kinds,
        has_api_key=SignerKind.API_KEY in kinds,
        has_token=bool(kinds & {SignerKind.JWT, SignerKind.OAUTH2}),
    )


def _identifier(name: str) -> str:
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()
    result = re.sub(r"[^a-z0-9_]+", "_", result).strip("_") or "scheme"
    if result[0].isdigit():
        result = f"_{result}"
    return result
