"""Runtime support imported by generated clients.

A generated client package contains only the code specific to its API.
Transport, signing, download dispatch and response rendering live here so
they are shared by every client and tested once.

Classes:
    :class:`APIClient` -- httpx-backed client with named signers.
    :class:`BasicSigner`, :class:`APIKeySigner`, :class:`JWTSigner`,
    :class:`OAuth2Signer` -- :class:`httpx.Auth` request signers.
    :class:`DispatchTable` -- file servers served by ``download``.
"""

from designcli.runtime.client import APIClient
from designcli.runtime.dispatch import (
    DispatchEntry,
    DispatchMatch,
    DispatchTable,
    run_download,
)
from designcli.runtime.response import handle_response
from designcli.runtime.signers import (
    APIKeySigner,
    BasicSigner,
    JWTSigner,
    OAuth2Signer,
    StaticToken,
    StaticTokenSource,
    TokenSource,
)

__all__ = [
    "APIClient",
    "APIKeySigner",
    "BasicSigner",
    "DispatchEntry",
    "DispatchMatch",
    "DispatchTable",
    "JWTSigner",
    "OAuth2Signer",
    "StaticToken",
    "StaticTokenSource",
    "TokenSource",
    "handle_response",
    "run_download",
]
