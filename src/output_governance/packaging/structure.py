"""Materialize the canonical {preview, artifacts/, manifest} layout."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from output_governance.config import DEFAULT_PACKAGING, PackagingConfig
from output_governance.errors import MaterializeError
from output_governance.packaging.artifacts import collect_output_artifacts, select_preview
from output_governance.packaging.manifest import build_manifest, write_manifest
from output_governance.packaging.models import CanonicalStructure, OutputArtifact, PackageOptions

LOGGER = logging.getLogger(__name__)


def preview_file_name(artifact: OutputArtifact, packaging: PackagingConfig | None = None) -> str:
    """Return `preview.<ext>` keeping the preview artifact's original extension."""

    cfg = packaging or DEFAULT_PACKAGING
    return f"{cfg.preview_prefix}{artifact.file_path.suffix}"


def _count_files(directory: Path) -> int:
    return sum(1 for path in directory.iterdir() if path.is_file())


def create_canonical_structure(
    source_dir: Path,
    target_dir: Path,
    options: PackageOptions,
    *,
    packaging: PackagingConfig | None = None,
    logger: logging.Logger | None = None,
) -> CanonicalStructure:
    """Copy a multi-output directory into the canonical layout under `target_dir`.

    Artifacts are copied, never moved; `source_dir` is left untouched. The
    manifest is built before any file is written so invalid metadata fails
    without leaving a half-built structure, and it is written last, after the
    artifact count on disk has been checked against it.
    """

    effective_logger = logger or LOGGER
    cfg = packaging or DEFAULT_PACKAGING
    source = Path(source_dir)
    target = Path(target_dir)

    artifacts = collect_output_artifacts(source, cfg, logger=effective_logger)
    preview = select_preview(artifacts, options.preview_selector)
    preview_name = preview_file_name(preview, cfg)
    try:
        manifest = build_manifest(options, artifacts, preview_name, cfg, logger=effective_logger)
    except (ValidationError, PydanticSerializationError) as exc:
        raise MaterializeError(f"invalid manifest metadata: {exc}", path=target) from exc

    artifacts_dir = target / cfg.artifacts_dir
    preview_path = target / preview_name
    manifest_path = target / cfg.manifest_file

    materialized: list[OutputArtifact] = []
    try:
        artifacts_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(preview.file_path, preview_path)
        for artifact in artifacts:
            destination = artifacts_dir / artifact.file_name
            shutil.copy2(artifact.file_path, destination)
            materialized.append(artifact.relocated(destination))
        present = _count_files(artifacts_dir)
    except OSError as exc:
        raise MaterializeError(f"cannot build canonical structure: {exc}", path=target) from exc

    if present != manifest.artifact_count:
        raise MaterializeError(
            f"artifacts directory holds {present} files but {manifest.artifact_count} were collected",
            path=artifacts_dir,
        )

    try:
        write_manifest(manifest, manifest_path)
    except (OSError, ValueError) as exc:
        raise MaterializeError(f"cannot write manifest: {exc}", path=manifest_path) from exc

    effective_logger.info(
        "structure.created job_id=%s root=%s preview=%s artifact_count=%s",
        options.job_id,
        target,
        preview_name,
        manifest.artifact_count,
    )
    return CanonicalStructure(
        root=target,
        preview_path=preview_path,
        artifacts_dir=artifacts_dir,
        manifest_path=manifest_path,
        artifacts=tuple(materialized),
        manifest=manifest,
    )
