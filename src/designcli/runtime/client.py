"""HTTP client used by generated CLIs.

:class:`APIClient` wraps :class:`httpx.Client` and layers on:

- **Signers** -- one :class:`httpx.Auth` per security scheme, registered by
  name with :meth:`APIClient.set_signer` and selected per request.
- **Payload encoding** -- JSON by default, form encoding or raw bodies when
  the caller overrides the content type.
- **Dump mode** -- ``--dump`` prints each request and response to stderr.
- **Error mapping** -- HTTP and transport failures become the typed
  exceptions of :mod:`designcli.exceptions`, so the generated ``main``
  exits with a meaningful code.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from designcli.exceptions import (
    AuthError,
    ConnectionError_,
    DownloadError,
    InvalidUsageError,
    NotFoundError,
    ServerError,
)
from designcli.output import get_output

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class APIClient:
    """Blocking client for the API a CLI was generated from.

    Args:
        scheme: URL scheme, ``http`` or ``https``.
        host: Host (and optional port) requests are sent to.
        timeout: Request timeout in seconds.
        dump: Print requests and responses to stderr.
        user_agent: ``User-Agent`` header value.
        transport: Optional httpx transport (tests use
            :class:`httpx.MockTransport`).

    Example::

        with APIClient(host="api.example.com", scheme="https") as client:
            client.set_signer("api_key", APIKeySigner(False, "X-Key", key))
            resp = client.request("GET", "/widgets", signer="api_key")
    """

    def __init__(
        self,
        scheme: str = "http",
        host: str = "localhost",
        timeout: float = 20.0,
        dump: bool = False,
        user_agent: str = "designcli",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.scheme = scheme
        self.host = host
        self.dump = dump
        self.user_agent = user_agent
        self.signers: dict[str, httpx.Auth] = {}
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> APIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"

    def set_signer(self, name: str, signer: httpx.Auth) -> None:
        """Register *signer* for the security scheme *name*."""
        self.signers[name] = signer

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        payload: Any = None,
        content_type: str = "",
        signer: Optional[str] = None,
    ) -> httpx.Response:
        """Send a request and return the response.

        Args:
            method: HTTP verb.
            path: Request path, appended to :attr:`base_url`.
            params: Query parameters; list values repeat the key.
            headers: Extra request headers.
            payload: Request body. ``None`` sends no body.
            content_type: Body content type. Empty means JSON.
            signer: Name of the registered signer to apply, if any.

        Returns:
            The response, when its status is below 400.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other status of 400 and above.
            ConnectionError_: On network and timeout errors.
        """
        merged_headers = {k: _header_value(v) for k, v in (headers or {}).items()}
        if payload is not None and content_type:
            merged_headers["Content-Type"] = content_type
        body = _encode_payload(payload, content_type)

        auth: Optional[httpx.Auth] = None
        if signer is not None:
            auth = self.signers.get(signer)
            if auth is None:
                logger.debug("No signer registered for scheme %r", signer)

        url = self.base_url + path
        try:
            request = self._client.build_request(
                method,
                url,
                params={k: v for k, v in (params or {}).items() if v is not None},
                headers=merged_headers,
                **body,
            )
            if self.dump:
                _dump_request(request)
            response = self._client.send(request, auth=auth)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"{method} {url}: {exc}") from exc

        if self.dump:
            _dump_response(response)
        _map_response_error(response)
        return response

    def download(self, path: str, outfile: str) -> int:
        """Stream the file at *path* into *outfile*.

        Returns:
            The number of bytes written.

        Raises:
            DownloadError: When *outfile* cannot be written.
        """
        url = self.base_url + path
        written = 0
        try:
            with self._client.stream("GET", url) as response:
                if self.dump:
                    _dump_response(response)
                if response.status_code >= 400:
                    response.read()
                    _map_response_error(response)
                with open(outfile, "wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
                        written += len(chunk)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"GET {url}: {exc}") from exc
        except OSError as exc:
            raise DownloadError(f"cannot write {outfile}: {exc}") from exc

        get_output().info(f"Downloaded {written} bytes to {outfile}")
        return written

    def websocket(self, path: str, signer: Optional[str] = None) -> None:
        """Connect to a websocket endpoint.

        Raises:
            InvalidUsageError: Always. The HTTP transport of generated
                clients cannot upgrade connections.
        """
        raise InvalidUsageError(
            f"{self.base_url}{path} is a websocket endpoint, which this client cannot open"
        )


# ---------------------------------------------------------------------- #
# Helpers
# ---------------------------------------------------------------------- #


def _encode_payload(payload: Any, content_type: str) -> dict[str, Any]:
    """Return the httpx keyword argument carrying *payload*."""
    if payload is None:
        return {}
    if not content_type:
        return {"json": payload}
    if content_type == FORM_CONTENT_TYPE and isinstance(payload, dict):
        return {"data": payload}
    if isinstance(payload, (bytes, str)):
        return {"content": payload}
    return {"content": json.dumps(payload)}


def _header_value(value: Any) -> str:
    """Render a header value the way query values are rendered by httpx."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_header_value(v) for v in value)
    return str(value)


def _map_response_error(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes."""
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"
    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg)


def _dump_request(request: httpx.Request) -> None:
    output = get_output()
    output.info(f"> {request.method} {request.url}")
    for key, value in request.headers.items():
        output.info(f"> {key}: {value}")
    if request.content:
        output.info(request.content.decode("utf-8", errors="replace"))


def _dump_response(response: httpx.Response) -> None:
    output = get_output()
    output.info(f"< HTTP {response.status_code} {response.reason_phrase or ''}")
    for key, value in response.headers.items():
        output.info(f"< {key}: {value}")
