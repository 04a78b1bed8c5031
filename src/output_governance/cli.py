"""Typer CLI entrypoint for output_governance."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, cast

import typer
import yaml

from output_governance.config import AppSettings, load_settings
from output_governance.errors import ArchiveFormatError, PackagingError
from output_governance.governance import fix_args, validate_and_fix_args, validate_args
from output_governance.inventory import artifact_inventory, format_counts, total_size_bytes, write_inventory_parquet
from output_governance.logging_utils import PACKAGE_LOGGER_NAME, configure_logging
from output_governance.packaging import (
    TASK_TYPES,
    PackageOptions,
    TaskType,
    archive_filename,
    auto_package,
    classify_output_dir,
    collect_output_artifacts,
    create_plain_archive,
    read_package_manifest,
    select_preview,
)
from output_governance.packaging.hints import engine_output_pattern, suggest_task_type

app = typer.Typer(
    add_completion=False,
    help="output_governance command line interface.",
    no_args_is_help=True,
)

_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}


def _load_and_optionally_configure_logger(
    config_file: Path | None,
    configure: bool,
) -> tuple[AppSettings, logging.Logger]:
    settings = load_settings(config_file=config_file)
    if configure:
        logger = configure_logging(
            settings.paths.logs_root / settings.logging.file_name,
            settings.logging.level,
            console=settings.logging.console,
        )
    else:
        logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    return settings, logger


def _parse_metadata(items: list[str] | None) -> dict[str, Any]:
    """Parse repeated KEY=VALUE options; values are decoded as JSON when possible."""

    metadata: dict[str, Any] = {}
    for item in items or []:
        key, sep, raw_value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise typer.BadParameter("metadata must be KEY=VALUE.")
        try:
            metadata[key] = json.loads(raw_value)
        except json.JSONDecodeError:
            metadata[key] = raw_value
    return metadata


def _normalize_task_type(value: str) -> TaskType:
    normalized = value.strip().lower()
    if normalized not in TASK_TYPES:
        raise typer.BadParameter(f"task-type must be one of: {','.join(TASK_TYPES)}")
    return cast(TaskType, normalized)


@app.command("show-config")
def show_config(
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the effective configuration after env overrides."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    rendered = yaml.safe_dump(settings.as_dict(), sort_keys=False)
    typer.echo(rendered)


@app.command("classify")
def classify_cmd(
    output_dir: Path = typer.Argument(..., help="Converter output directory."),
    engine: str | None = typer.Option(None, "--engine", help="Producing engine, for naming hints."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Classify an output directory as single- or multi-output."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=False)
    classification = classify_output_dir(output_dir, settings.packaging, logger=logger)

    typer.echo(f"is_multi: {str(classification.is_multi).lower()}")
    typer.echo(f"file_count: {classification.file_count}")
    if classification.reason:
        typer.echo(f"reason: {classification.reason}")
    typer.echo(f"suggested_task_type: {suggest_task_type(classification.file_names)}")
    if engine:
        typer.echo(f"engine_output_pattern: {engine_output_pattern(engine) or '-'}")


@app.command("package")
def package_cmd(
    output_dir: Path = typer.Argument(..., help="Converter output directory."),
    job_id: str = typer.Option(..., "--job-id", help="Job identifier."),
    engine: str = typer.Option(..., "--engine", help="Producing engine name."),
    source_format: str = typer.Option(..., "--source-format", help="Declared source format."),
    output_format: str = typer.Option(..., "--output-format", help="Declared output format."),
    task_type: str = typer.Option("multi-output", "--task-type", help="Manifest task type."),
    metadata: list[str] | None = typer.Option(None, "--metadata", "-m", help="Extra manifest KEY=VALUE."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Package a finished job's output when it is multi-output."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True)
    options = PackageOptions(
        job_id=job_id,
        engine=engine,
        source_format=source_format,
        output_format=output_format,
        metadata=_parse_metadata(metadata),
        task_type=_normalize_task_type(task_type),
    )
    try:
        result = auto_package(output_dir, options, packaging=settings.packaging, logger=logger)
    except PackagingError as exc:
        typer.echo(f"packaging_failed: stage={exc.stage} error={exc}", err=True)
        raise typer.Exit(code=2) from exc

    if result is None:
        typer.echo("packaged: false")
        return
    typer.echo("packaged: true")
    typer.echo(f"package_path: {result.package_path}")
    typer.echo(f"artifact_count: {result.manifest.artifact_count}")
    typer.echo(f"preview: {result.manifest.preview}")
    typer.echo(f"staging_dir: {result.staging_dir}")


@app.command("archive")
def archive_cmd(
    source_dir: Path = typer.Argument(..., help="Directory to bundle."),
    output_path: Path = typer.Argument(..., help="Archive path; forced to the plain archive extension."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Bundle a directory into an uncompressed plain archive."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=True)
    try:
        final_path = create_plain_archive(source_dir, output_path, packaging=settings.packaging, logger=logger)
    except (PackagingError, ArchiveFormatError) as exc:
        typer.echo(f"archive_failed: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(f"archive_path: {final_path}")


@app.command("archive-name")
def archive_name_cmd(
    base_name: str = typer.Argument(..., help="File name to rewrite."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the sanctioned plain-archive name for BASE_NAME."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    try:
        typer.echo(archive_filename(base_name, settings.packaging))
    except ArchiveFormatError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("check-args", context_settings=_PASSTHROUGH)
def check_args_cmd(
    args: list[str] = typer.Argument(..., help="Encoder arguments, output path last (use -- before them)."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Validate encoder arguments against the governance rules."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    report = validate_args(args, settings.governance)
    typer.echo(json.dumps(report.as_dict(), indent=2))
    if not report.valid:
        raise typer.Exit(code=1)


@app.command("fix-args", context_settings=_PASSTHROUGH)
def fix_args_cmd(
    args: list[str] = typer.Argument(..., help="Encoder arguments, output path last (use -- before them)."),
    output_format: str | None = typer.Option(
        None,
        "--output-format",
        help="Declared output format; enables pixel-format injection for image targets.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the governed version of an encoder argument list, one argument per line."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=False)
    if output_format is None:
        fixed = fix_args(args, settings.governance)
    else:
        if not args:
            raise typer.BadParameter("arguments must end with the output path.")
        fixed = list(
            validate_and_fix_args(args[-1], output_format, args, config=settings.governance, logger=logger).args
        )
    for arg in fixed:
        typer.echo(arg)


@app.command("inspect")
def inspect_cmd(
    package_path: Path = typer.Argument(..., help="Governed package to read."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the manifest stored inside a governed package."""

    settings, _ = _load_and_optionally_configure_logger(config_file, configure=False)
    try:
        manifest = read_package_manifest(package_path, settings.packaging)
    except (OSError, ValueError) as exc:
        typer.echo(f"inspect_failed: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(json.dumps(manifest.to_document(), indent=2, ensure_ascii=False))


@app.command("inventory")
def inventory_cmd(
    output_dir: Path = typer.Argument(..., help="Converter output directory."),
    parquet_path: Path | None = typer.Option(None, "--parquet", help="Optional parquet output path."),
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        help="Optional settings YAML path.",
        exists=False,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Summarize the artifacts a packaging run would collect."""

    settings, logger = _load_and_optionally_configure_logger(config_file, configure=False)
    try:
        artifacts = collect_output_artifacts(output_dir, settings.packaging, logger=logger)
    except PackagingError as exc:
        typer.echo(f"inventory_failed: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    preview_name = select_preview(artifacts).file_name if artifacts else None
    inventory = artifact_inventory(artifacts, preview_name=preview_name)

    typer.echo(f"artifact_count: {inventory.height}")
    typer.echo(f"total_size_bytes: {total_size_bytes(inventory)}")
    typer.echo(f"preview: {preview_name or '-'}")
    for fmt, count in format_counts(inventory).items():
        typer.echo(f"format.{fmt}: {count}")
    if parquet_path is not None:
        typer.echo(f"inventory_parquet: {write_inventory_parquet(inventory, parquet_path)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
