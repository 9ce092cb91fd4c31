"""Build the download dispatch table from an API's file servers.

Every file server of every resource becomes one
:class:`~designcli.runtime.dispatch.DispatchEntry`, in declaration order.
A request path carrying a wildcard (``/assets/*filepath``) marks a
directory server matched by its prefix (``/assets/``). Any other request
path is a single file whose default output name is the base name of the
served file.
"""

from __future__ import annotations

import posixpath
import re
from typing import Optional

from designcli.models import WILDCARD_RE, APIDefinition, FileServerDefinition
from designcli.runtime.dispatch import DispatchEntry, DispatchTable


def build_dispatch_table(api: APIDefinition) -> Optional[DispatchTable]:
    """Return the dispatch table of *api*, or ``None`` without file servers."""
    entries: list[DispatchEntry] = []
    used: set[str] = set()
    for resource in api.iter_resources():
        for fs in resource.iter_file_servers():
            entries.append(build_entry(fs, _unique(transfer_name(fs), used)))
    if not entries:
        return None
    return DispatchTable(entries=tuple(entries))


def build_entry(fs: FileServerDefinition, name: str) -> DispatchEntry:
    """Describe a single file server as a dispatch entry named *name*."""
    if fs.is_dir:
        request_dir, _ = posixpath.split(fs.request_path)
        return DispatchEntry(
            name=name,
            request_path=fs.request_path,
            is_dir=True,
            request_dir=request_dir.rstrip("/") + "/",
        )
    return DispatchEntry(
        name=name,
        request_path=fs.request_path,
        file_name=posixpath.basename(fs.file_path.replace("\\", "/")),
    )


def transfer_name(fs: FileServerDefinition) -> str:
    """Derive the transfer function name of *fs*.

    Example::

        /swagger.json       -> download_swagger_json
        /assets/*filepath   -> download_assets
    """
    path = WILDCARD_RE.sub("", fs.request_path)
    slug = re.sub(r"[^a-z0-9]+", "_", path.lower()).strip("_")
    return f"download_{slug or 'root'}"


def _unique(name: str, used: set[str]) -> str:
    candidate = name
    counter = 2
    while candidate in used:
        candidate = f"{name}_{counter}"
        counter += 1
    used.add(candidate)
    return candidate
