"""Cypress end-to-end project generation.

Every application generated with ``e2e_test_runner="cypress"`` gets a
sibling ``<project>-e2e`` project containing:

- ``cypress.json`` and the TypeScript configs
- a smoke spec under ``src/integration/`` that opens the home page
- page-object helpers, custom commands and the plugins file
- a linter config matching the application's linter
"""

from __future__ import annotations

from typing import Any

from .options import NormalizedOptions
from .templates import TemplateRenderer


class CypressGenerator:
    """Plans the Cypress project files and its workspace entry."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def plan(self, norm: NormalizedOptions, tokens: dict[str, str]) -> list[tuple[str, str]]:
        """Return ``(template_key, workspace_relative_path)`` pairs."""
        root = norm.e2e_project_root
        pairs: list[tuple[str, str]] = []
        for group in ("cypress", f"lint/{norm.options.linter}"):
            for template_key, rel in self.renderer.plan_group(group, tokens):
                pairs.append((template_key, f"{root}/{rel}"))
        return pairs

    def context(self, norm: NormalizedOptions, base: dict[str, Any]) -> dict[str, Any]:
        """Template context for files under the e2e project root."""
        offset = norm.offset_from_root(norm.e2e_project_root)
        if norm.options.linter == "eslint":
            lint_extends = ["plugin:cypress/recommended", f"{offset}.eslintrc"]
        else:
            lint_extends = [f"{offset}tslint.json"]
        return {
            **base,
            "offset": offset,
            "root": norm.e2e_project_root,
            "lint_extends": lint_extends,
            "lint_env": {"cypress/globals": True} if norm.options.linter == "eslint" else {},
        }

    def project_config(self, norm: NormalizedOptions) -> dict[str, Any]:
        """Build the ``workspace.json`` entry for the e2e project."""
        root = norm.e2e_project_root
        return {
            "root": root,
            "sourceRoot": f"{root}/src",
            "projectType": "application",
            "targets": {
                "e2e": {
                    "executor": "@nrwl/cypress:cypress",
                    "options": {
                        "cypressConfig": f"{root}/cypress.json",
                        "tsConfig": f"{root}/tsconfig.e2e.json",
                        "devServerTarget": f"{norm.project_name}:serve",
                    },
                    "configurations": {
                        "production": {
                            "devServerTarget": f"{norm.project_name}:serve:production",
                        }
                    },
                },
                "lint": lint_target(norm.options.linter, root, [f"{root}/tsconfig.e2e.json"]),
            },
        }


def lint_target(linter: str, root: str, ts_configs: list[str]) -> dict[str, Any]:
    """Build a ``lint`` target for *linter* rooted at *root*.

    *ts_configs* is only used by TSLint, which lints through the compiler.
    """
    if linter == "eslint":
        return {
            "executor": "@nrwl/linter:eslint",
            "options": {"lintFilePatterns": [f"{root}/**/*.{{ts,tsx,js,jsx}}"]},
        }
    return {
        "executor": "@nrwl/linter:lint",
        "options": {
            "linter": "tslint",
            "tsConfig": ts_configs,
            "exclude": ["**/node_modules/**", f"!{root}/**/*"],
        },
    }
