"""Write generated modules into a workspace directory.

Layout of one generated API under the workspace root::

    <workspace>/apis/<api-name>/
        tsconfig.json              # maps "@/schemas/*" to ./schemas/*
        schemas/
            .gitkeep
            <Name>.ts
        templates/
            .gitkeep
            users/
                .gitkeep
                get.ts
                {user_id}/
                    .gitkeep
                    get.ts

Every file is written with :func:`~rekku.config.atomic_write`. Generated
paths are checked to stay inside the API directory: a schema name or URL
path containing ``..`` raises :class:`~rekku.exceptions.GenerationError`
instead of writing elsewhere.

:func:`format_generated_code` runs ``prettier`` over the result when it is
installed. Formatting is cosmetic, so a missing or failing prettier only
produces a warning.
"""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Iterable

from rekku.config import atomic_write
from rekku.exceptions import GenerationError
from rekku.models import SchemaModule, Template
from rekku.output import debug, warning

SOURCE_SUFFIX = ".ts"
PLACEHOLDER = ".gitkeep"

TSCONFIG: dict = {
    "compilerOptions": {
        "target": "ES2022",
        "module": "ESNext",
        "moduleResolution": "bundler",
        "allowImportingTsExtensions": True,
        "noEmit": True,
        "strict": True,
        "baseUrl": ".",
        "paths": {"@/schemas/*": ["./schemas/*"]},
    },
    "include": ["**/*"],
    "exclude": ["node_modules"],
}

_PRETTIER_TIMEOUT = 120


def api_directory(workspace: str | Path, api_name: str) -> Path:
    """Return ``<workspace>/apis/<api_name>``.

    Raises:
        GenerationError: If *api_name* is empty or is not a single path
            segment.
    """
    if not api_name or api_name in (".", "..") or "/" in api_name or "\\" in api_name:
        raise GenerationError(f"Invalid API name: '{api_name}'")
    return Path(workspace) / "apis" / api_name


def write_api(
    workspace: str | Path,
    api_name: str,
    modules: Iterable[SchemaModule],
    templates: Iterable[Template],
) -> Path:
    """Write ``tsconfig.json``, schema modules and templates for one API.

    Existing files at the same paths are overwritten; other files in the
    directory are left alone.

    Args:
        workspace: The workspace root (``.rekku`` by default).
        api_name: Directory name of this API under ``apis/``.
        modules: Schema modules from
            :func:`~rekku.generator.schemas.compile_named_schemas`.
        templates: Templates from
            :func:`~rekku.generator.templates.generate_templates`.

    Returns:
        The API directory.

    Raises:
        GenerationError: If a target path escapes the API directory or a
            file cannot be written.
    """
    api_dir = api_directory(workspace, api_name)
    schemas_dir = api_dir / "schemas"
    templates_dir = api_dir / "templates"
    templates_root = templates_dir.resolve()

    try:
        atomic_write(api_dir / "tsconfig.json", json.dumps(TSCONFIG, indent=2) + "\n")
        atomic_write(schemas_dir / PLACEHOLDER, "")
        atomic_write(templates_dir / PLACEHOLDER, "")

        for module in modules:
            target = _target(schemas_dir, module.file_path)
            atomic_write(target, module.content)
            debug(f"Wrote {target}")

        for template in templates:
            target = _target(templates_dir, template.file_path)
            directory = target.parent
            while directory != templates_root and not (directory / PLACEHOLDER).exists():
                atomic_write(directory / PLACEHOLDER, "")
                directory = directory.parent
            atomic_write(target, template.content)
            debug(f"Wrote {target}")
    except OSError as exc:
        raise GenerationError(f"Failed to write generated files: {exc}") from exc

    return api_dir


def _target(base: Path, file_path: str) -> Path:
    """Resolve *file_path* under *base*, refusing anything that leaves it."""
    target = base / f"{file_path}{SOURCE_SUFFIX}"
    root = base.resolve()
    resolved = target.resolve()
    if resolved != root and root not in resolved.parents:
        raise GenerationError(f"Refusing to write outside {base}: {file_path}")
    return resolved


def format_generated_code(api_dir: Path) -> bool:
    """Run ``prettier --write`` over the generated ``.ts`` and ``.json`` files.

    Returns:
        ``True`` if prettier ran and succeeded, ``False`` if it is not
        installed or reported a failure (a warning is printed either way).
    """
    prettier = shutil.which("prettier")
    if prettier is None:
        warning("prettier not found on PATH, skipping code formatting")
        return False

    command = [
        prettier,
        "--write",
        "--no-ignore",
        f"{api_dir}/**/*{SOURCE_SUFFIX}",
        f"{api_dir}/**/*.json",
    ]
    debug(f"Running {' '.join(command)}")
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=_PRETTIER_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        warning(f"prettier could not be run: {exc}")
        return False

    if result.returncode != 0:
        warning(f"prettier formatting failed for some files: {result.stderr.strip()}")
        return False
    return True
