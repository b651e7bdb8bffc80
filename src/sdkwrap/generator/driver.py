"""Run the wrapper pipeline over every endpoint of an SDK.

The driver owns the run: it discovers endpoints, creates the single
:class:`~sdkwrap.generator.params.EmittedTypeRegistry` shared by all of
them, and turns each endpoint into zero or more constructor functions
plus one wrapper. A :class:`~sdkwrap.exceptions.GenerationError` raised
for one endpoint (or one nested type) is recorded as a
:class:`~sdkwrap.models.GenerationFailure` and the run continues.

Output is grouped either into one unit per declaring API class (named
after the class's short name, or its full name when two classes share a
short name; constructors first) or into a single unit named after the SDK.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from sdkwrap.exceptions import GenerationError
from sdkwrap.generator.builder import FunctionBuilder, RequiredPredicate, make_marker_predicate
from sdkwrap.generator.naming import select_noun, select_verb
from sdkwrap.generator.params import (
    EmittedTypeRegistry,
    discover_nested_types,
    find_name_collisions,
    flatten_parameters,
    group_parameters,
)
from sdkwrap.models import (
    EndpointDescriptor,
    FunctionDescriptor,
    GenerationFailure,
    GenerationResult,
    GeneratorConfig,
    OutputUnit,
    SdkMetadata,
    TypeKind,
    TypeRef,
    Verb,
)
from sdkwrap.reflection.discovery import discover_endpoints

logger = logging.getLogger(__name__)

_VOID = TypeRef(name="Void", full_name="System.Void", kind=TypeKind.VOID)


def unit_name_for(declaring_type: str) -> str:
    """Short class name used as the output unit name when grouping."""
    return declaring_type.rsplit(".", 1)[-1]


def command_parts(endpoint: EndpointDescriptor) -> tuple[Verb, str]:
    """Return the verb and noun of the wrapper generated for *endpoint*.

    Endpoints without a return type, or returning void, take their noun
    from ``Void``.

    Raises:
        UnrecognizedVerbError: If the method name has no verb prefix.
    """
    payload = endpoint.return_type
    if payload is None or payload.is_void:
        payload = _VOID
    return select_verb(endpoint.method_name), select_noun(payload)


def _name_units(units: dict[str, OutputUnit]) -> None:
    """Name each per-class unit by its short class name, or its full name when short names clash."""
    counts = Counter(unit_name_for(key) for key in units)
    for key, unit in units.items():
        short = unit_name_for(key)
        unit.name = short if counts[short] == 1 else key


class _Run:
    """State of one generation run."""

    def __init__(self, metadata: SdkMetadata, builder: FunctionBuilder) -> None:
        self.metadata = metadata
        self.builder = builder
        self.registry = EmittedTypeRegistry()
        self.failures: list[GenerationFailure] = []

    def fail(self, subject: str, exc: GenerationError) -> None:
        logger.warning("Skipping %s (%s): %s", subject, exc.category, exc)
        self.failures.append(GenerationFailure(
            subject=subject, category=exc.category, message=str(exc)
        ))

    def constructors_for(self, nested: list[TypeRef]) -> list[FunctionDescriptor]:
        built: list[FunctionDescriptor] = []
        for type_ref in nested:
            if not self.registry.add(type_ref):
                continue
            try:
                built.append(self.builder.build_constructor(select_noun(type_ref), type_ref))
            except GenerationError as exc:
                self.fail(type_ref.key, exc)
        return built

    def process(self, endpoint: EndpointDescriptor) -> tuple[list[FunctionDescriptor], FunctionDescriptor]:
        verb, noun = command_parts(endpoint)

        groups = group_parameters(endpoint.parameters, self.metadata)
        flattened = flatten_parameters(groups)
        collisions = find_name_collisions(flattened)
        if collisions:
            logger.warning(
                "%s: flattened parameter name(s) %s occur more than once",
                endpoint.qualified_name, ", ".join(collisions),
            )

        # Wrapper first: a failing endpoint must not claim registry entries.
        wrapper = self.builder.build_wrapper(verb, noun, flattened, endpoint)
        constructors = self.constructors_for(discover_nested_types(groups))
        return constructors, wrapper


def generate(
    metadata: SdkMetadata,
    config: Optional[GeneratorConfig] = None,
    is_required: Optional[RequiredPredicate] = None,
) -> GenerationResult:
    """Generate wrapper and constructor descriptors for every endpoint.

    Args:
        metadata: The reflected SDK.
        config: Generation settings; defaults to :class:`GeneratorConfig`.
        is_required: Overrides the required-property predicate built from
            ``config.required_markers``.

    Returns:
        The output units in discovery order plus any collected failures.
    """
    config = config or GeneratorConfig()
    predicate = is_required or make_marker_predicate(config.required_markers)
    run = _Run(metadata, FunctionBuilder(metadata, predicate, handle_name=config.handle_name))

    endpoints = discover_endpoints(metadata, config.class_pattern)
    units: dict[str, OutputUnit] = {}

    for endpoint in endpoints:
        try:
            constructors, wrapper = run.process(endpoint)
        except GenerationError as exc:
            run.fail(endpoint.qualified_name, exc)
            continue

        key = endpoint.declaring_type if config.group_by_declaring_type else metadata.name
        unit = units.setdefault(key, OutputUnit(name=key))
        unit.constructors.extend(constructors)
        unit.wrappers.append(wrapper)

    if config.group_by_declaring_type:
        _name_units(units)

    result = GenerationResult(
        units=list(units.values()),
        failures=run.failures,
        endpoint_count=len(endpoints),
    )
    logger.info(
        "Generated %d function(s) from %d endpoint(s), %d failure(s)",
        result.function_count, result.endpoint_count, len(result.failures),
    )
    return result
