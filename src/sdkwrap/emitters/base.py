"""Common machinery for target-language emitters.

An emitter turns :class:`~sdkwrap.models.FunctionDescriptor` objects into
source text. Every concrete emitter renders through Jinja2 templates
shipped in ``emitters/templates/``; subclasses only name their templates
and contribute the per-function context and filters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterable

from jinja2 import Environment, FileSystemLoader

import sdkwrap
from sdkwrap.models import FunctionDescriptor

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``emitters/templates/``)."""


def create_environment() -> Environment:
    """Create the Jinja2 environment shared by all emitters.

    Autoescape is off: templates produce source code, not HTML. Block
    trimming and lstrip keep control-flow tags from leaving blank lines.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class Emitter(ABC):
    """Base class for target-language emitters.

    Class attributes:
        name: Target name used on the command line (``--target``).
        file_extension: Extension of written files, including the dot.
        function_template: Template rendering one function.
        preamble_template: Template rendering the per-file header.
    """

    name: str = ""
    file_extension: str = ""
    function_template: str = ""
    preamble_template: str = ""

    def __init__(self) -> None:
        self._env = create_environment()
        self._env.filters.update(self.filters())

    def filters(self) -> dict[str, Callable[..., Any]]:
        """Extra Jinja2 filters available to this emitter's templates."""
        return {}

    @abstractmethod
    def function_context(self, function: FunctionDescriptor) -> dict[str, Any]:
        """Return template variables for *function* beyond ``fn`` itself."""

    def render_function(self, function: FunctionDescriptor) -> str:
        """Render one function definition, ending with a single newline."""
        template = self._env.get_template(self.function_template)
        rendered = template.render(fn=function, **self.function_context(function))
        return rendered.rstrip() + "\n"

    def render_preamble(self) -> str:
        """Render the header written once at the top of every output file."""
        template = self._env.get_template(self.preamble_template)
        return template.render(version=sdkwrap.__version__).rstrip() + "\n"

    def render_unit(self, functions: Iterable[FunctionDescriptor]) -> str:
        """Render *functions* in order, separated by one blank line."""
        return "\n".join(self.render_function(f) for f in functions)
