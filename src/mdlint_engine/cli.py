from __future__ import annotations

import json
from pathlib import Path
from typing import List, TypedDict

import typer
import yaml

from .config import LintOptions, load_config
from .engine import LintEngine
from .models import Violation

app = typer.Typer(help="Markdown lint engine CLI.", no_args_is_help=True)

OUTPUT_FORMATS = ("json", "text")


class DocumentPayload(TypedDict):
    path: str
    violations: List[dict]


@app.command()
def analyze(
    files: List[Path] = typer.Argument(..., help="Markdown files to lint."),
    config: Path | None = typer.Option(None, "--config", "-c"),
    output_format: str = typer.Option(
        "json", "--format", "-f", help="Output format: 'json' or 'text'."
    ),
) -> None:
    """Lint Markdown files and print their violations."""
    output_format = output_format.lower().strip()
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter(
            f"Unsupported format '{output_format}'.", param_hint="--format"
        )
    options = _load_options(config)
    engine = LintEngine(options=options)

    documents: List[DocumentPayload] = []
    for path in files:
        text = _read_markdown(path)
        violations = engine.lint_text(text, file_path=path)
        documents.append(
            {"path": str(path), "violations": [v.to_dict() for v in violations]}
        )
        if output_format == "text":
            for violation in violations:
                typer.echo(_format_text(path, violation))

    if output_format == "json":
        typer.echo(json.dumps({"documents": documents}, indent=2))


@app.command()
def rules() -> None:
    """List the rules known to the engine."""
    engine = LintEngine()
    for descriptor in engine.catalog:
        enabled = "enabled" if descriptor.enabled_by_default else "disabled"
        typer.echo(
            f"{descriptor.id}\t{descriptor.name}\t{descriptor.default_severity.label}\t{enabled}"
        )


@app.command("print-config")
def print_config() -> None:
    """Print the default options as YAML."""
    typer.echo(yaml.safe_dump(LintOptions().to_dict(), sort_keys=False))


def main() -> None:
    app()


def _load_options(path: Path | None) -> LintOptions:
    try:
        return load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _read_markdown(path: Path) -> str:
    if path.is_dir():
        raise typer.BadParameter(
            f"{path} is a directory; pass Markdown files explicitly.", param_hint="FILES"
        )
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(f"Unable to read {path}: {exc}", param_hint="FILES") from exc


def _format_text(path: Path, violation: Violation) -> str:
    return (
        f"{path}:{violation.line + 1}:{violation.column_start + 1}: "
        f"{violation.rule_id} {violation.message}"
    )


if __name__ == "__main__":  # pragma: no cover
    main()
