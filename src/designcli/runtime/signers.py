"""Request signers used by generated clients.

Each signer is an :class:`httpx.Auth`, so the client only has to pass the
signer of an action as ``auth=`` and httpx applies it to the outgoing
request. The generated ``__main__`` builds one signer per supported
security scheme from the global credential flags and registers it on the
:class:`~designcli.runtime.client.APIClient` under the scheme's name.

A signer with empty credentials leaves the request untouched, so running
a client without ``--user``/``--key``/``--token`` sends anonymous requests
instead of malformed ``Authorization`` headers.
"""

from __future__ import annotations

import base64
from typing import Generator, Protocol

import httpx

from designcli.exceptions import InvalidUsageError


class StaticToken:
    """A token that never expires, as given on the command line."""

    def __init__(self, type: str, value: str) -> None:
        self.type = type or "Bearer"
        self.value = value

    def set_auth_header(self, request: httpx.Request) -> None:
        request.headers["Authorization"] = f"{self.type} {self.value}"

    def valid(self) -> bool:
        return bool(self.value)


class TokenSource(Protocol):
    """Anything that can hand out the current token."""

    def token(self) -> StaticToken: ...


class StaticTokenSource:
    """A :class:`TokenSource` always returning the same token."""

    def __init__(self, token: StaticToken) -> None:
        self._token = token

    def token(self) -> StaticToken:
        return self._token


class BasicSigner(httpx.Auth):
    """Sign requests with HTTP basic auth."""

    def __init__(self, user: str, password: str) -> None:
        self.user = user
        self.password = password

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self.user or self.password:
            raw = f"{self.user}:{self.password}".encode("utf-8")
            request.headers["Authorization"] = "Basic " + base64.b64encode(raw).decode("ascii")
        yield request


class APIKeySigner(httpx.Auth):
    """Sign requests with an API key, in a header or in the query string.

    Args:
        sign_query: Put the key in the query string instead of a header.
        key_name: Header or query parameter name.
        key_value: The key itself.
        fmt: ``%``-style format applied to the key, e.g. ``"Bearer %s"``.
            An empty format sends the key as is.
    """

    def __init__(self, sign_query: bool, key_name: str, key_value: str, fmt: str = "") -> None:
        self.sign_query = sign_query
        self.key_name = key_name
        self.key_value = key_value
        self.fmt = fmt

    def value(self) -> str:
        if not self.fmt:
            return self.key_value
        try:
            return self.fmt % self.key_value
        except (TypeError, ValueError) as exc:
            raise InvalidUsageError(
                f"invalid key format {self.fmt!r}: expected a single %s placeholder"
            ) from exc

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if self.key_value:
            if self.sign_query:
                request.url = request.url.copy_merge_params({self.key_name: self.value()})
            else:
                request.headers[self.key_name] = self.value()
        yield request


class _TokenSigner(httpx.Auth):
    def __init__(self, source: TokenSource) -> None:
        self.source = source

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self.source.token()
        if token.valid():
            token.set_auth_header(request)
        yield request


class JWTSigner(_TokenSigner):
    """Sign requests with a JSON Web Token."""


class OAuth2Signer(_TokenSigner):
    """Sign requests with an OAuth2 access token."""
