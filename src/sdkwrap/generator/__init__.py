"""Wrapper generator -- the metadata-to-function pipeline.

Given :class:`~sdkwrap.models.SdkMetadata`, every discovered endpoint goes
through the same steps:

1. :mod:`~sdkwrap.generator.naming` -- pick the verb and noun.
2. :mod:`~sdkwrap.generator.params` -- group the declared parameters and
   flatten complex ones into a call surface.
3. :mod:`~sdkwrap.generator.builder` -- describe the wrapper function and
   one constructor function per nested complex type.

:mod:`~sdkwrap.generator.classifier` decides which types are passed
through and which are flattened. :mod:`~sdkwrap.generator.driver` runs the
pipeline over a whole SDK and is imported directly::

    from sdkwrap.generator.driver import generate
"""

from sdkwrap.generator.builder import FunctionBuilder, make_marker_predicate
from sdkwrap.generator.classifier import classify, is_complex, is_simple
from sdkwrap.generator.naming import select_noun, select_verb
from sdkwrap.generator.params import (
    EmittedTypeRegistry,
    discover_nested_types,
    flatten_parameters,
    group_parameters,
)

__all__ = [
    "EmittedTypeRegistry",
    "FunctionBuilder",
    "classify",
    "discover_nested_types",
    "flatten_parameters",
    "group_parameters",
    "is_complex",
    "is_simple",
    "make_marker_predicate",
    "select_noun",
    "select_verb",
]
