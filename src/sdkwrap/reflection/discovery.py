"""Select the client methods that become generated wrappers.

Only concrete API classes are considered, optionally narrowed by an
``fnmatch`` pattern over their full names (``*.Api.*Api`` selects the
classes OpenAPI Generator emits for .NET). Within a class, a method is an
endpoint when it is public, non-static, declared on that class, not a
compiler-generated special name, and its name starts with a recognised
verb prefix.
"""

from __future__ import annotations

import fnmatch
import logging
from typing import Optional

from sdkwrap.generator.naming import has_verb_prefix
from sdkwrap.models import ApiClass, EndpointDescriptor, MethodInfo, SdkMetadata

logger = logging.getLogger(__name__)


def _class_matches(api_class: ApiClass, class_pattern: Optional[str]) -> bool:
    if class_pattern is None:
        return True
    name = api_class.type.full_name or api_class.type.name
    return fnmatch.fnmatchcase(name, class_pattern)


def is_endpoint_method(method: MethodInfo) -> bool:
    """Return ``True`` when *method* qualifies as a wrapper endpoint."""
    return (
        method.is_public
        and not method.is_static
        and method.declared
        and not method.is_special_name
        and has_verb_prefix(method.name)
    )


def discover_endpoints(
    metadata: SdkMetadata,
    class_pattern: Optional[str] = None,
) -> list[EndpointDescriptor]:
    """Return one :class:`~sdkwrap.models.EndpointDescriptor` per qualifying method.

    Endpoints are returned in class order, then method order. Parameters
    are sorted by their declared position.

    Args:
        metadata: The reflected SDK.
        class_pattern: Optional ``fnmatch`` pattern applied to each API
            class's full name.
    """
    endpoints: list[EndpointDescriptor] = []
    for api_class in metadata.api_classes:
        if api_class.is_abstract or not _class_matches(api_class, class_pattern):
            continue
        declaring = api_class.type.full_name or api_class.type.name
        for method in api_class.methods:
            if not is_endpoint_method(method):
                continue
            endpoints.append(EndpointDescriptor(
                declaring_type=declaring,
                method_name=method.name,
                return_type=method.return_type,
                parameters=tuple(sorted(method.parameters, key=lambda p: p.position)),
            ))
    logger.debug("Discovered %d endpoint(s) in %s", len(endpoints), metadata.name)
    return endpoints
