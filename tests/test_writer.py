"""Tests for sdkwrap.writer -- stdout, single-file, and per-unit output."""

from __future__ import annotations

from pathlib import Path

import pytest

from sdkwrap.emitters import PowerShellEmitter, PythonEmitter
from sdkwrap.exceptions import OutputError
from sdkwrap.generator.driver import generate
from sdkwrap.models import GenerationResult, GeneratorConfig, SdkMetadata
from sdkwrap.output import OutputFormat, OutputManager, set_output
from sdkwrap.writer import render_units, write_result


@pytest.fixture
def single(netbox_metadata: SdkMetadata) -> GenerationResult:
    return generate(netbox_metadata)


@pytest.fixture
def grouped(netbox_metadata: SdkMetadata) -> GenerationResult:
    return generate(netbox_metadata, GeneratorConfig(group_by_declaring_type=True))


class TestRenderUnits:
    def test_single_preamble(self, grouped: GenerationResult) -> None:
        text = render_units(PowerShellEmitter(), grouped.units)
        assert text.count("# Generated by sdkwrap") == 1
        assert text.count("function ") == 6


class TestWriteResult:
    def test_stdout(self, single: GenerationResult, capfd) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        assert write_result(single, PowerShellEmitter()) == []
        out = capfd.readouterr().out
        assert out.startswith("# Generated by sdkwrap")
        assert "function Modify-Site {" in out

    def test_dash_is_stdout(self, single: GenerationResult, capfd) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        assert write_result(single, PythonEmitter(), destination="-") == []
        assert "def modify_site(" in capfd.readouterr().out

    def test_single_file(self, single: GenerationResult, tmp_path: Path) -> None:
        target = tmp_path / "out" / "NetBox.ps1"
        assert write_result(single, PowerShellEmitter(), destination=str(target)) == [target]
        text = target.read_text(encoding="utf-8")
        assert text.startswith("# Generated by sdkwrap")
        assert text.count("function ") == 6

    def test_file_is_truncated_without_append(self, single: GenerationResult, tmp_path: Path) -> None:
        target = tmp_path / "NetBox.ps1"
        target.write_text("# stale\n", encoding="utf-8")
        write_result(single, PowerShellEmitter(), destination=str(target))
        assert "# stale" not in target.read_text(encoding="utf-8")

    def test_append_keeps_existing_content(self, single: GenerationResult, tmp_path: Path) -> None:
        target = tmp_path / "NetBox.ps1"
        target.write_text("# hand-written helpers\n", encoding="utf-8")
        write_result(single, PowerShellEmitter(), destination=str(target), append=True)
        text = target.read_text(encoding="utf-8")
        assert text.startswith("# hand-written helpers\n")
        # No second preamble in a non-empty file.
        assert "# Generated by sdkwrap" not in text
        assert text.count("function ") == 6

    def test_append_twice_duplicates_functions(self, single: GenerationResult, tmp_path: Path) -> None:
        target = tmp_path / "NetBox.ps1"
        write_result(single, PowerShellEmitter(), destination=str(target), append=True)
        write_result(single, PowerShellEmitter(), destination=str(target), append=True)
        text = target.read_text(encoding="utf-8")
        assert text.count("# Generated by sdkwrap") == 1
        assert text.count("function ") == 12

    def test_directory_without_group(self, single: GenerationResult, tmp_path: Path) -> None:
        paths = write_result(single, PythonEmitter(), destination=str(tmp_path))
        assert paths == [tmp_path / "NetBoxSdk.py"]

    def test_grouped_files(self, grouped: GenerationResult, tmp_path: Path) -> None:
        out_dir = tmp_path / "NetBoxPS"
        paths = write_result(grouped, PowerShellEmitter(), destination=str(out_dir), group=True)
        assert paths == [out_dir / "DcimApi.ps1", out_dir / "TenancyApi.ps1"]

        dcim = paths[0].read_text(encoding="utf-8")
        tenancy = paths[1].read_text(encoding="utf-8")
        assert dcim.startswith("# Generated by sdkwrap")
        assert tenancy.startswith("# Generated by sdkwrap")
        assert "function New-TenantRef" in dcim
        assert "function New-TenantRef" not in tenancy
        assert "function Modify-Site" in tenancy

    def test_grouped_into_file_raises(self, grouped: GenerationResult, tmp_path: Path) -> None:
        target = tmp_path / "single.ps1"
        target.write_text("", encoding="utf-8")
        with pytest.raises(OutputError, match="needs a directory"):
            write_result(grouped, PowerShellEmitter(), destination=str(target), group=True)

    def test_unwritable_destination_raises(self, single: GenerationResult, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(OutputError, match="Cannot write"):
            write_result(single, PowerShellEmitter(), destination=str(blocker / "out.ps1"))

    def test_empty_result_writes_nothing(self, tmp_path: Path) -> None:
        target = tmp_path / "empty.ps1"
        assert write_result(GenerationResult(), PowerShellEmitter(), destination=str(target)) == []
        assert not target.exists()
