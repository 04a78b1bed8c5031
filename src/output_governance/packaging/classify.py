"""Decide whether a finished job produced one deliverable or many."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from output_governance.config import DEFAULT_PACKAGING, PackagingConfig
from output_governance.errors import ArtifactCollectionError
from output_governance.packaging.models import OutputClassification

LOGGER = logging.getLogger(__name__)


def is_excluded_name(file_name: str, packaging: PackagingConfig | None = None) -> bool:
    """Return True for hidden files, manifests and already-built governed packages."""

    cfg = packaging or DEFAULT_PACKAGING
    if file_name.startswith("."):
        return True
    if file_name == cfg.manifest_file:
        return True
    return file_name.lower().endswith(cfg.governed_extension.lower())


def list_eligible_files(
    output_dir: Path,
    packaging: PackagingConfig | None = None,
    *,
    strict: bool = False,
    logger: logging.Logger | None = None,
) -> list[Path]:
    """List regular, non-hidden output files directly inside `output_dir`.

    A missing directory yields an empty list. Unreadable directories yield an
    empty list too unless `strict` is set, in which case the I/O error is raised
    as an `ArtifactCollectionError`.
    """

    effective_logger = logger or LOGGER
    directory = Path(output_dir)
    if not directory.is_dir():
        return []

    try:
        with os.scandir(directory) as entries:
            names = [
                entry.name
                for entry in entries
                if entry.is_file(follow_symlinks=False) and not is_excluded_name(entry.name, packaging)
            ]
    except OSError as exc:
        if strict:
            raise ArtifactCollectionError(f"cannot enumerate output directory: {exc}", path=directory) from exc
        effective_logger.warning("classify.scan_failed output_dir=%s error=%s", directory, exc)
        return []

    return [directory / name for name in sorted(names)]


def classify_output_dir(
    output_dir: Path,
    packaging: PackagingConfig | None = None,
    logger: logging.Logger | None = None,
) -> OutputClassification:
    """Classify an output directory by file count alone.

    Zero or one eligible file is single-output; two or more is multi-output.
    File names and formats are not consulted.
    """

    files = list_eligible_files(output_dir, packaging, logger=logger)
    file_count = len(files)
    names = tuple(path.name for path in files)
    if file_count <= 1:
        return OutputClassification(is_multi=False, file_count=file_count, file_names=names)
    return OutputClassification(
        is_multi=True,
        file_count=file_count,
        reason=f"Multiple output files: {file_count}",
        file_names=names,
    )
