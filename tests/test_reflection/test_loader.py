"""Tests for sdkwrap.reflection.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from sdkwrap.exceptions import ManifestError
from sdkwrap.reflection.loader import (
    _load_from_file,
    _load_from_stdin,
    _load_from_url,
    _parse_content,
    load_source,
    validate_manifest_version,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

_MANIFEST = {"manifest_version": 1, "sdk": {"name": "Remote"}, "types": [], "api_classes": []}


# ---------------------------------------------------------------------------
# load_source dispatch
# ---------------------------------------------------------------------------


class TestLoadSource:
    """Test load_source routes to the correct loader."""

    def test_loads_from_yaml_file(self) -> None:
        result = load_source(str(FIXTURES_DIR / "netbox_sdk.yaml"))
        assert result["manifest_version"] == 1
        assert result["sdk"]["name"] == "NetBoxSdk"

    def test_quoted_nullable_shorthand_survives_yaml(self) -> None:
        result = load_source(str(FIXTURES_DIR / "netbox_sdk.yaml"))
        dcim = next(c for c in result["api_classes"] if c["type"] == "NetBox.Api.DcimApi")
        get_devices = next(m for m in dcim["methods"] if m["name"] == "GetDevices")
        assert [p["type"] for p in get_devices["parameters"]] == ["System.Int32?", "System.Int32?"]

    def test_unquoted_nullable_in_flow_mapping_is_a_manifest_error(self, tmp_path: Path) -> None:
        path = tmp_path / "sdk.yaml"
        path.write_text(
            "manifest_version: 1\ntypes:\n  - {type: A.B, properties: [{name: X, type: System.Int32?}]}\n",
            encoding="utf-8",
        )
        with pytest.raises(ManifestError):
            load_source(str(path))

    def test_loads_from_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "sdk.json"
        path.write_text(json.dumps(_MANIFEST), encoding="utf-8")
        assert load_source(str(path))["sdk"]["name"] == "Remote"

    def test_loads_from_stdin(self) -> None:
        with patch("sdkwrap.reflection.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(json.dumps(_MANIFEST))
            result = load_source("-")
        assert result["sdk"]["name"] == "Remote"

    def test_loads_from_url(self) -> None:
        mock_response = httpx.Response(
            status_code=200,
            json=_MANIFEST,
            request=httpx.Request("GET", "https://example.com/sdk.json"),
        )
        with patch("sdkwrap.reflection.loader.httpx.get", return_value=mock_response):
            result = load_source("https://example.com/sdk.json")
        assert result["sdk"]["name"] == "Remote"


# ---------------------------------------------------------------------------
# _load_from_file
# ---------------------------------------------------------------------------


class TestLoadFromFile:
    def test_unknown_extension_falls_back_to_content(self, tmp_path: Path) -> None:
        path = tmp_path / "sdk.manifest"
        path.write_text("manifest_version: 1\nsdk:\n  name: Plain\n", encoding="utf-8")
        assert _load_from_file(str(path))["sdk"]["name"] == "Plain"

    def test_file_not_found_raises(self) -> None:
        with pytest.raises(ManifestError, match="not found"):
            _load_from_file("/nonexistent/path/to/sdk.yaml")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.json"
        empty.write_text("", encoding="utf-8")
        with pytest.raises(ManifestError, match="empty"):
            _load_from_file(str(empty))

    def test_invalid_json_file_raises(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{invalid json", encoding="utf-8")
        with pytest.raises(ManifestError, match="Invalid JSON"):
            _load_from_file(str(bad))

    def test_non_object_yaml_raises(self, tmp_path: Path) -> None:
        listing = tmp_path / "list.yaml"
        listing.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ManifestError, match="must be a JSON/YAML object"):
            _load_from_file(str(listing))


# ---------------------------------------------------------------------------
# _load_from_stdin
# ---------------------------------------------------------------------------


class TestLoadFromStdin:
    def test_reads_yaml_from_stdin(self) -> None:
        content = textwrap.dedent("""\
            manifest_version: 1
            sdk:
              name: FromStdin
        """)
        with patch("sdkwrap.reflection.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(content)
            result = _load_from_stdin()
        assert result["sdk"]["name"] == "FromStdin"

    def test_empty_stdin_raises(self) -> None:
        with patch("sdkwrap.reflection.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("   \n")
            with pytest.raises(ManifestError, match="No input"):
                _load_from_stdin()


# ---------------------------------------------------------------------------
# _load_from_url
# ---------------------------------------------------------------------------


class TestLoadFromUrl:
    def test_loads_yaml_from_url(self) -> None:
        mock_response = httpx.Response(
            status_code=200,
            text="manifest_version: 1\nsdk:\n  name: YamlRemote\n",
            headers={"content-type": "application/x-yaml"},
            request=httpx.Request("GET", "https://example.com/sdk.yaml"),
        )
        with patch("sdkwrap.reflection.loader.httpx.get", return_value=mock_response):
            result = _load_from_url("https://example.com/sdk.yaml")
        assert result["sdk"]["name"] == "YamlRemote"

    def test_http_error_raises(self) -> None:
        mock_response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("sdkwrap.reflection.loader.httpx.get", return_value=mock_response):
            with pytest.raises(ManifestError, match="HTTP 404"):
                _load_from_url("https://example.com/missing.json")

    def test_connection_error_raises(self) -> None:
        with patch(
            "sdkwrap.reflection.loader.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(ManifestError, match="Failed to fetch"):
                _load_from_url("https://unreachable.example.com/sdk.json")


# ---------------------------------------------------------------------------
# _parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_parses_json(self) -> None:
        assert _parse_content('{"key": "value"}') == {"key": "value"}

    def test_parses_yaml(self) -> None:
        assert _parse_content("key: value\nnested:\n  a: 1") == {"key": "value", "nested": {"a": 1}}

    def test_json_hint_forces_json_only(self) -> None:
        with pytest.raises(ManifestError, match="Invalid JSON"):
            _parse_content("not: valid: json: {{{", hint="json")

    def test_invalid_content_raises(self) -> None:
        with pytest.raises(ManifestError, match="Failed to parse"):
            _parse_content("}{not valid at all][", hint="")

    def test_null_yaml_raises(self) -> None:
        with pytest.raises(ManifestError, match="empty document"):
            _parse_content("---\n", hint="yaml")


# ---------------------------------------------------------------------------
# validate_manifest_version
# ---------------------------------------------------------------------------


class TestValidateManifestVersion:
    def test_accepts_integer_one(self) -> None:
        assert validate_manifest_version({"manifest_version": 1}) == "1"

    def test_accepts_minor_versions(self) -> None:
        assert validate_manifest_version({"manifest_version": "1.3"}) == "1.3"

    def test_rejects_missing_field(self) -> None:
        with pytest.raises(ManifestError, match="Missing 'manifest_version'"):
            validate_manifest_version({"sdk": {"name": "x"}})

    def test_rejects_unsupported_version(self) -> None:
        with pytest.raises(ManifestError, match="Unsupported manifest version: 2"):
            validate_manifest_version({"manifest_version": 2})

    def test_rejects_lookalike_version(self) -> None:
        with pytest.raises(ManifestError, match="Unsupported"):
            validate_manifest_version({"manifest_version": "10"})
