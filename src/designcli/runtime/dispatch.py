"""Download dispatch for generated ``download`` commands.

A :class:`DispatchTable` lists the file servers of an API in declaration
order. :meth:`DispatchTable.match` probes single-file entries first, by
exact equality, then directory entries, by prefix. The first hit wins.
Entries are deliberately not ranked by specificity: a directory declared
after a broader one that covers it is never reached.

:func:`run_download` is what a generated ``download`` command calls. It
resolves the request path and hands the transfer to the matching function.
When nothing matches it raises :class:`~designcli.exceptions.DownloadError`
without calling any transfer.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from designcli.exceptions import DownloadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchEntry:
    """One file server as seen by the download command.

    Attributes:
        name: Name of the transfer function serving this entry.
        request_path: Declared request path (may end in a wildcard).
        is_dir: Whether the entry serves a whole directory.
        request_dir: Prefix matched for directory entries (ends with ``/``).
        file_name: Default output file name for single-file entries.
    """

    name: str
    request_path: str
    is_dir: bool = False
    request_dir: str = ""
    file_name: str = ""


@dataclass(frozen=True)
class DispatchMatch:
    """Result of a successful :meth:`DispatchTable.match`.

    ``path`` is the canonical request path for file entries and the
    remainder after the directory prefix for directory entries.
    """

    entry: DispatchEntry
    path: str
    outfile: str


@dataclass(frozen=True)
class DispatchTable:
    """Ordered file-server entries of an API."""

    entries: tuple[DispatchEntry, ...] = field(default_factory=tuple)

    @property
    def files(self) -> list[DispatchEntry]:
        return [e for e in self.entries if not e.is_dir]

    @property
    def directories(self) -> list[DispatchEntry]:
        return [e for e in self.entries if e.is_dir]

    def match(self, path: str, outfile: Optional[str] = None) -> Optional[DispatchMatch]:
        """Find the entry serving *path*.

        Args:
            path: Requested path; a leading ``/`` is added when missing.
            outfile: Caller-supplied output file name, if any.

        Returns:
            The match with its resolved output name, or ``None``.
        """
        rpath = canonicalize(path)
        for entry in self.files:
            if rpath == entry.request_path:
                return DispatchMatch(entry, rpath, outfile or entry.file_name)
        for entry in self.directories:
            if rpath.startswith(entry.request_dir):
                rest = rpath[len(entry.request_dir):]
                return DispatchMatch(entry, rest, outfile or posixpath.basename(rest))
        return None


def canonicalize(path: str) -> str:
    """Insert a leading ``/`` into *path* if it has none."""
    if not path.startswith("/"):
        return "/" + path
    return path


def run_download(
    table: DispatchTable,
    transfers: Mapping[str, Callable[..., Any]],
    path: str,
    outfile: Optional[str] = None,
) -> Any:
    """Download *path* through the transfer function of the matching entry.

    Single-file transfers are called as ``fn(outfile)``, directory transfers
    as ``fn(rest, outfile)`` where ``rest`` is the path below the directory
    prefix.

    Raises:
        DownloadError: If no entry matches; no transfer is attempted.
    """
    match = table.match(path, outfile)
    if match is None:
        raise DownloadError(f"don't know how to download {canonicalize(path)}")

    logger.debug("Downloading %s via %s to %s", path, match.entry.name, match.outfile)
    transfer = transfers[match.entry.name]
    if match.entry.is_dir:
        return transfer(match.path, match.outfile)
    return transfer(match.outfile)
