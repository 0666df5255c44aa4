"""Render a release list with Jinja2 templates.

Built-in templates ship inside the package (``compact``,
``keepachangelog`` and ``json``); any other value of ``template`` is
taken as a path to a Jinja2 template file.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import (
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
    select_autoescape,
)

from auto_changelog.core.models import dump_releases
from auto_changelog.exceptions import TemplateError

if TYPE_CHECKING:
    from auto_changelog.config.models import ChangelogOptions
    from auto_changelog.core.models import Release

BUILTIN_TEMPLATES = {
    "compact": "compact.md.j2",
    "keepachangelog": "keepachangelog.md.j2",
    "json": "json.j2",
}


def _environment(loader: FileSystemLoader | PackageLoader) -> Environment:
    env = Environment(
        loader=loader,
        autoescape=select_autoescape(enabled_extensions=("html",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["releases_json"] = dump_releases
    return env


def replace_text(text: str, replacements: dict[str, str]) -> str:
    """Apply ``{pattern: replacement}`` regex substitutions in order."""
    for pattern, replacement in replacements.items():
        text = re.sub(pattern, replacement, text)
    return text


def compile_template(options: ChangelogOptions, releases: list[Release]) -> str:
    """Render ``releases`` with the configured template.

    Raises:
        TemplateError: If the template is unknown or fails to render
    """
    if options.template in BUILTIN_TEMPLATES:
        env = _environment(PackageLoader("auto_changelog", "templates"))
        name = BUILTIN_TEMPLATES[options.template]
    else:
        path = Path(options.template)
        if not path.is_file():
            raise TemplateError(
                f"Template {options.template!r} not found; "
                f"use one of {', '.join(BUILTIN_TEMPLATES)} or a file path"
            )
        env = _environment(FileSystemLoader(path.parent))
        name = path.name

    try:
        rendered = env.get_template(name).render(releases=releases, options=options)
    except JinjaTemplateError as e:
        raise TemplateError(f"Failed to render template {options.template!r}: {e}") from e

    return replace_text(rendered, options.replace_text)
