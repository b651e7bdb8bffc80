"""Tests for sdkwrap.generator.driver -- whole-run generation."""

from __future__ import annotations

import logging

import pytest

from sdkwrap.generator.driver import command_parts, generate, unit_name_for
from sdkwrap.models import (
    EndpointDescriptor,
    FunctionKind,
    GeneratorConfig,
    InvokeMethod,
    SdkMetadata,
    TypeKind,
    TypeRef,
    Verb,
)
from sdkwrap.reflection.manifest import extract_metadata


def _names(functions) -> list[str]:
    return [f.name for f in functions]


@pytest.fixture
def nested_failure_metadata() -> SdkMetadata:
    """An endpoint whose parameter nests a type that cannot be constructed."""
    return extract_metadata({
        "manifest_version": 1,
        "sdk": {"name": "Acme"},
        "types": [
            {"type": "Acme.Outer", "properties": [
                {"name": "Inner", "type": "Acme.Inner"},
                {"name": "Label", "type": "System.String"},
            ]},
            {"type": "Acme.Inner", "has_default_constructor": False, "properties": [
                {"name": "Value", "type": "System.Int32"},
            ]},
        ],
        "api_classes": [
            {"type": "Acme.Api.OuterApi", "methods": [
                {"name": "CreateOuter", "return_type": "Acme.Outer", "parameters": [
                    {"name": "outer", "type": "Acme.Outer"},
                ]},
            ]},
        ],
    })


class TestCommandParts:
    def test_verb_and_noun(self) -> None:
        endpoint = EndpointDescriptor(
            declaring_type="NetBox.Api.DcimApi",
            method_name="GetSites",
            return_type=TypeRef(name="SiteListResponse", full_name="NetBox.Models.SiteListResponse"),
        )
        assert command_parts(endpoint) == (Verb.READ, "Site")

    def test_missing_return_type_is_void(self) -> None:
        endpoint = EndpointDescriptor(declaring_type="Acme.Api", method_name="DeleteThing")
        assert command_parts(endpoint) == (Verb.REMOVE, "Void")

    def test_python_none_return_is_void(self) -> None:
        endpoint = EndpointDescriptor(
            declaring_type="acme.Api",
            method_name="delete_thing",
            return_type=TypeRef(name="None", full_name="builtins.None", kind=TypeKind.VOID),
        )
        assert command_parts(endpoint) == (Verb.REMOVE, "Void")


class TestUnitNameFor:
    def test_short_name(self) -> None:
        assert unit_name_for("NetBox.Api.DcimApi") == "DcimApi"
        assert unit_name_for("DcimApi") == "DcimApi"


class TestGenerate:
    """End-to-end generation over the NetBox manifest."""

    def test_single_unit(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata)

        assert result.endpoint_count == 7
        assert [u.name for u in result.units] == ["NetBoxSdk"]
        unit = result.units[0]
        assert _names(unit.constructors) == ["NewTenantRef"]
        assert _names(unit.wrappers) == [
            "ReadDevice", "NewSite", "NewDevice", "RemoveVoid", "ModifySite",
        ]
        assert result.function_count == 6

    def test_constructors_precede_wrappers(self, netbox_metadata: SdkMetadata) -> None:
        unit = generate(netbox_metadata).units[0]
        kinds = [f.kind for f in unit.functions()]
        assert kinds == [FunctionKind.CONSTRUCTOR] + [FunctionKind.WRAPPER] * 5

    def test_failures_are_collected(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata)
        assert [(f.subject, f.category) for f in result.failures] == [
            ("NetBox.Api.TenancyApi.CreateWidget", "construction-path"),
            ("NetBox.Api.TenancyApi.GetTenants", "introspection"),
        ]
        assert "Ghost" in result.failures[1].message

    def test_failures_are_logged(self, netbox_metadata: SdkMetadata, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="sdkwrap"):
            generate(netbox_metadata)
        assert "CreateWidget" in caplog.text

    def test_grouped_by_declaring_type(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata, GeneratorConfig(group_by_declaring_type=True))

        assert [u.name for u in result.units] == ["DcimApi", "TenancyApi"]
        dcim, tenancy = result.units
        assert _names(dcim.constructors) == ["NewTenantRef"]
        assert _names(dcim.wrappers) == ["ReadDevice", "NewSite", "NewDevice", "RemoveVoid"]
        # TenantRef was already emitted for DcimApi earlier in the run.
        assert tenancy.constructors == []
        assert _names(tenancy.wrappers) == ["ModifySite"]

    def test_constructor_emitted_once_per_run(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata, GeneratorConfig(group_by_declaring_type=True))
        constructors = [f.name for u in result.units for f in u.constructors]
        assert constructors.count("NewTenantRef") == 1

    def test_class_pattern(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata, GeneratorConfig(class_pattern="*.TenancyApi"))
        assert result.endpoint_count == 3
        assert _names(result.units[0].wrappers) == ["ModifySite"]
        # No earlier endpoint claimed TenantRef in this run.
        assert _names(result.units[0].constructors) == ["NewTenantRef"]

    def test_no_endpoints(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata, GeneratorConfig(class_pattern="*.Nothing"))
        assert result.endpoint_count == 0
        assert result.units == []
        assert result.failures == []

    def test_handle_name_from_config(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata, GeneratorConfig(handle_name="NetBox"))
        wrapper = result.units[0].wrappers[0]
        assert wrapper.parameters[0].name == "NetBox"

    def test_required_markers_from_config(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata, GeneratorConfig(required_markers=[]))
        ctor = result.units[0].constructors[0]
        assert {p.name: p.required for p in ctor.parameters} == {"Id": True, "Name": False}

    def test_predicate_override(self, netbox_metadata: SdkMetadata) -> None:
        result = generate(netbox_metadata, is_required=lambda prop: True)
        ctor = result.units[0].constructors[0]
        assert all(p.required for p in ctor.parameters)

    def test_failed_nested_constructor_keeps_wrapper(self, nested_failure_metadata: SdkMetadata) -> None:
        result = generate(nested_failure_metadata)

        assert _names(result.units[0].wrappers) == ["NewOuter"]
        assert result.units[0].constructors == []
        assert [(f.subject, f.category) for f in result.failures] == [
            ("Acme.Inner", "construction-path"),
        ]


class TestZeroParameterEndpoint:
    def test_wrapper_takes_only_the_handle(self) -> None:
        metadata = extract_metadata({
            "manifest_version": 1,
            "sdk": {"name": "NetBoxSdk"},
            "types": [{"type": "NetBox.Models.DeviceListResponse"}],
            "api_classes": [
                {"type": "NetBox.Api.DcimApi", "methods": [
                    {"name": "GetDevices", "return_type": "NetBox.Models.DeviceListResponse"},
                ]},
            ],
        })
        result = generate(metadata)

        assert result.failures == []
        (unit,) = result.units
        assert unit.constructors == []
        (wrapper,) = unit.wrappers
        assert wrapper.name == "ReadDevice"
        assert [p.name for p in wrapper.parameters] == ["Sdk"]
        assert wrapper.body == [InvokeMethod(receiver="Sdk", method="GetDevices", arguments=[])]


class TestSameShortClassName:
    @pytest.fixture
    def metadata(self) -> SdkMetadata:
        def api(full_name: str) -> dict:
            return {"type": full_name, "methods": [{"name": "DeleteSite", "return_type": "System.Void"}]}

        return extract_metadata({
            "manifest_version": 1,
            "sdk": {"name": "Multi"},
            "api_classes": [api("A.Api.DcimApi"), api("B.Api.DcimApi"), api("B.Api.TenancyApi")],
        })

    def test_one_unit_per_declaring_type(self, metadata: SdkMetadata) -> None:
        result = generate(metadata, GeneratorConfig(group_by_declaring_type=True))

        assert [u.name for u in result.units] == ["A.Api.DcimApi", "B.Api.DcimApi", "TenancyApi"]
        assert all(len(u.wrappers) == 1 for u in result.units)

    def test_single_unit_without_grouping(self, metadata: SdkMetadata) -> None:
        result = generate(metadata)
        assert [u.name for u in result.units] == ["Multi"]
        assert len(result.units[0].wrappers) == 3
