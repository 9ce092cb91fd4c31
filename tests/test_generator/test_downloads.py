"""Tests for designcli.generator.downloads.

Covers:
- Dispatch table construction from file servers, in declaration order
- File vs directory entries and their derived fields
- Transfer function naming and de-duplication
- APIs without file servers
"""

from __future__ import annotations

from designcli.generator.downloads import build_dispatch_table, build_entry, transfer_name
from designcli.models import APIDefinition, FileServerDefinition, ResourceDefinition


def _api(*servers: tuple[str, str]) -> APIDefinition:
    return APIDefinition(
        name="files",
        resources=[
            ResourceDefinition(
                name="static",
                file_servers=[
                    FileServerDefinition(request_path=r, file_path=f) for r, f in servers
                ],
            )
        ],
    )


class TestBuildEntry:
    def test_file_entry(self) -> None:
        entry = build_entry(
            FileServerDefinition(request_path="/swagger.json", file_path="public/swagger.json"),
            "download_swagger_json",
        )
        assert entry.is_dir is False
        assert entry.file_name == "swagger.json"
        assert entry.request_dir == ""

    def test_directory_entry(self) -> None:
        entry = build_entry(
            FileServerDefinition(request_path="/assets/*filepath", file_path="public/assets"),
            "download_assets",
        )
        assert entry.is_dir is True
        assert entry.request_dir == "/assets/"
        assert entry.file_name == ""

    def test_windows_file_path(self) -> None:
        entry = build_entry(
            FileServerDefinition(request_path="/logo.png", file_path="public\\img\\logo.png"),
            "download_logo_png",
        )
        assert entry.file_name == "logo.png"


class TestTransferName:
    def test_file(self) -> None:
        fs = FileServerDefinition(request_path="/swagger.json", file_path="x")
        assert transfer_name(fs) == "download_swagger_json"

    def test_directory(self) -> None:
        fs = FileServerDefinition(request_path="/assets/*filepath", file_path="x")
        assert transfer_name(fs) == "download_assets"

    def test_root_directory(self) -> None:
        fs = FileServerDefinition(request_path="/*filepath", file_path="x")
        assert transfer_name(fs) == "download_root"


class TestBuildDispatchTable:
    def test_no_file_servers(self) -> None:
        assert build_dispatch_table(APIDefinition(name="empty")) is None

    def test_declaration_order(self) -> None:
        table = build_dispatch_table(
            _api(("/a/*p", "a"), ("/index.html", "index.html"), ("/b/*p", "b"))
        )
        assert table is not None
        assert [e.request_path for e in table.entries] == ["/a/*p", "/index.html", "/b/*p"]
        assert [e.request_path for e in table.files] == ["/index.html"]
        assert [e.request_path for e in table.directories] == ["/a/*p", "/b/*p"]

    def test_names_are_unique(self) -> None:
        table = build_dispatch_table(_api(("/docs/*p", "docs"), ("/docs/*q", "docs2")))
        assert table is not None
        assert [e.name for e in table.entries] == ["download_docs", "download_docs_2"]

    def test_shelf_fixture(self, shelf_api: APIDefinition) -> None:
        table = build_dispatch_table(shelf_api)
        assert table is not None
        assert [e.name for e in table.entries] == ["download_swagger_json", "download_assets"]
