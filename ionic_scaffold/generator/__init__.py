"""Ionic React application generator.

Takes an ``ApplicationOptions`` record and renders an Ionic React app, its
Cypress e2e project and the workspace metadata updates.

Quick usage::

    from ionic_scaffold.generator import ApplicationGenerator, ApplicationOptions

    options = ApplicationOptions(name="my-app", style="scss", capacitor=True)
    generator = ApplicationGenerator(options, "/tmp/workspace")
    result = await generator.generate()
"""

from ionic_scaffold.generator.cypress_gen import CypressGenerator
from ionic_scaffold.generator.generator import (
    ApplicationGenerator,
    GenerationResult,
    GeneratorError,
    PlannedFile,
)
from ionic_scaffold.generator.options import (
    ApplicationOptions,
    NormalizedOptions,
    OptionsError,
    normalize_options,
)
from ionic_scaffold.generator.templates import TemplateRenderer
from ionic_scaffold.generator.workspace import Workspace, init_workspace

__all__ = [
    "ApplicationGenerator",
    "ApplicationOptions",
    "CypressGenerator",
    "GenerationResult",
    "GeneratorError",
    "NormalizedOptions",
    "OptionsError",
    "PlannedFile",
    "TemplateRenderer",
    "Workspace",
    "init_workspace",
    "normalize_options",
]
