"""Jinja2 template rendering for application scaffolding.

Provides the TemplateRenderer class which loads templates from the
``ionic_scaffold/generator/templates/`` directory.  Files ending in ``.j2``
are rendered with a context dictionary; every other file (icons, fixtures)
is copied byte for byte.  Output paths may contain ``__token__``
placeholders that are substituted from a token mapping, so a template named
``src/app/__app_file_name__.__component_ext__.j2`` becomes
``src/app/app.tsx``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ..utils import to_camel_case, to_kebab_case, to_pascal_case, to_snake_case


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

TEMPLATE_SUFFIX = ".j2"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for application scaffolding.

    Templates are grouped into top-level directories (``app``, ``jest``,
    ``styles`` ...) so the generator can select whole groups based on the
    requested options.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["kebab_case"] = to_kebab_case
        self.env.filters["pascal_case"] = to_pascal_case
        self.env.filters["snake_case"] = to_snake_case
        self.env.filters["camel_case"] = to_camel_case

    # -- Rendering -----------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render the template at *template_path* (relative to the template root)."""
        return self.env.get_template(template_path).render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        return self.env.from_string(template_string).render(**context)

    def materialise(self, template_path: str, context: dict[str, Any]) -> bytes:
        """Return the bytes to write for *template_path*.

        ``.j2`` templates are rendered; icons, fixtures and other assets are
        returned unchanged.
        """
        if template_path.endswith(TEMPLATE_SUFFIX):
            return self.render(template_path, context).encode("utf-8")
        return (self.template_dir / template_path).read_bytes()

    async def write(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Materialise *template_path* into *output_path*, creating parents."""
        data = self.materialise(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_bytes, out, data)
        return out

    # -- Planning ----------------------------------------------------------

    def plan_group(
        self,
        group: str,
        tokens: dict[str, str],
    ) -> list[tuple[str, str]]:
        """Map every file of a template group to its output path.

        Returns ``(template_key, relative_output_path)`` pairs sorted by
        template key.  The ``.j2`` suffix is stripped and ``__token__``
        placeholders are substituted from *tokens*.
        """
        pairs: list[tuple[str, str]] = []
        for template_key in self.list_templates(group):
            rel = template_key[len(group) + 1:]
            if rel.endswith(TEMPLATE_SUFFIX):
                rel = rel[: -len(TEMPLATE_SUFFIX)]
            pairs.append((template_key, substitute_tokens(rel, tokens)))
        return pairs

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all template files under *prefix*.

        Paths are relative to the template root and use forward slashes.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*")
            if p.is_file() and "__pycache__" not in p.parts
        )


# ---------------------------------------------------------------------------
# Path tokens
# ---------------------------------------------------------------------------


def substitute_tokens(path: str, tokens: dict[str, str]) -> str:
    """Replace ``__key__`` placeholders in *path*.

    ``__dot__`` always expands to ``.`` so dotfiles can be shipped as
    package data.

    Raises:
        KeyError: If a placeholder has no value in *tokens*.
    """
    result = path.replace("__dot__", ".")
    for key, value in tokens.items():
        result = result.replace(f"__{key}__", value)
    if "__" in result.replace("__mocks__", ""):
        raise KeyError(f"Unresolved path token in {path!r} -> {result!r}")
    return result


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
