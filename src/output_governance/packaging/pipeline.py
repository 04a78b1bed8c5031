"""Governed packaging orchestration: classify, structure, manifest, serialize."""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path
from uuid import uuid4

from output_governance.config import DEFAULT_PACKAGING, PackagingConfig
from output_governance.errors import ClassificationError, SerializeError
from output_governance.packaging.archive import governed_package_filename, safe_job_component, write_tar
from output_governance.packaging.classify import classify_output_dir
from output_governance.packaging.models import CanonicalStructure, OutputClassification, PackageOptions, PackageResult
from output_governance.packaging.structure import create_canonical_structure

LOGGER = logging.getLogger(__name__)


def staging_dir_for(source_dir: Path, job_id: str, packaging: PackagingConfig | None = None) -> Path:
    """Return a fresh, job-scoped staging directory path beside the source directory."""

    cfg = packaging or DEFAULT_PACKAGING
    return Path(source_dir).resolve().parent / f"{cfg.staging_prefix}{safe_job_component(job_id)}_{uuid4().hex[:8]}"


def serialize_structure(structure: CanonicalStructure, output_path: Path) -> Path:
    """Write a canonical structure into one uncompressed governed package."""

    members = [
        structure.preview_path.name,
        structure.artifacts_dir.name,
        structure.manifest_path.name,
    ]
    try:
        return write_tar(structure.root, members, output_path)
    except (OSError, tarfile.TarError) as exc:
        raise SerializeError(f"cannot write governed package: {exc}", path=output_path) from exc


def create_governed_package(
    source_dir: Path,
    output_path: Path,
    options: PackageOptions,
    *,
    packaging: PackagingConfig | None = None,
    classification: OutputClassification | None = None,
    logger: logging.Logger | None = None,
) -> PackageResult:
    """Package a multi-output directory as a governed `.tra` file.

    The canonical structure is staged in a job-scoped directory that is left in
    place afterwards (see `discard_staging`). Either a complete package exists at
    the returned path or a `PackagingError` is raised and nothing was written
    there.
    """

    effective_logger = logger or LOGGER
    cfg = packaging or DEFAULT_PACKAGING
    source = Path(source_dir).resolve()
    if not source.is_dir():
        raise ClassificationError("source directory does not exist", path=source)

    package_path = Path(governed_package_filename(str(output_path), cfg))
    staging_dir = staging_dir_for(source, options.job_id, cfg)

    structure = create_canonical_structure(
        source,
        staging_dir,
        options,
        packaging=cfg,
        logger=effective_logger,
    )
    serialize_structure(structure, package_path)

    effective_logger.info(
        "package.created job_id=%s path=%s artifact_count=%s",
        options.job_id,
        package_path,
        structure.manifest.artifact_count,
    )
    return PackageResult(
        package_path=package_path,
        manifest=structure.manifest,
        staging_dir=staging_dir,
        classification=classification,
    )


def auto_package(
    output_dir: Path,
    options: PackageOptions,
    *,
    packaging: PackagingConfig | None = None,
    logger: logging.Logger | None = None,
) -> PackageResult | None:
    """Package a finished job's output when, and only when, it is multi-output.

    Returns None for single-output directories. Multi-output results are
    written to `<parent of output_dir>/<job_id>.tra`.
    """

    effective_logger = logger or LOGGER
    cfg = packaging or DEFAULT_PACKAGING
    # Resolved so a relative "." places the package beside the directory, not inside it.
    output = Path(output_dir).resolve()

    classification = classify_output_dir(output, cfg, logger=effective_logger)
    if not classification.is_multi:
        effective_logger.info(
            "auto_package.single_output job_id=%s file_count=%s; no packaging needed",
            options.job_id,
            classification.file_count,
        )
        return None

    effective_logger.info("auto_package.multi_output job_id=%s reason=%s", options.job_id, classification.reason)
    package_path = output.parent / f"{safe_job_component(options.job_id)}{cfg.governed_extension}"
    return create_governed_package(
        output,
        package_path,
        options,
        packaging=cfg,
        classification=classification,
        logger=effective_logger,
    )


def discard_staging(result: PackageResult) -> bool:
    """Remove the staging structure once the package is confirmed written."""

    if not result.package_path.is_file():
        return False
    if not result.staging_dir.exists():
        return False
    shutil.rmtree(result.staging_dir)
    return True
