"""Collect, order, and pick a preview among a job's output artifacts."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from output_governance.config import PackagingConfig
from output_governance.errors import ArtifactCollectionError, NoArtifactsError, PreviewSelectionError
from output_governance.packaging.classify import list_eligible_files
from output_governance.packaging.models import OutputArtifact, PreviewSelector
from output_governance.utils.time_utils import timestamp_to_utc, utc_iso_string

LOGGER = logging.getLogger(__name__)

_DIGIT_RUNS = re.compile(r"(\d+)")


def natural_sort_key(file_name: str) -> tuple[tuple[object, ...], str]:
    """Numeric-aware sort key: `item_2` sorts before `item_10`.

    `re.split` with a capturing group alternates non-digit and digit runs, so
    every odd position holds digits and integer/string runs never meet.
    """

    parts = _DIGIT_RUNS.split(file_name)
    key = tuple(int(part) if index % 2 else part.casefold() for index, part in enumerate(parts))
    return key, file_name


def _artifact_from_path(path: Path) -> OutputArtifact:
    stats = path.stat()
    created = getattr(stats, "st_birthtime", None) or stats.st_mtime
    return OutputArtifact(
        file_name=path.name,
        file_path=path.resolve(),
        format=path.suffix.lower().lstrip("."),
        size=stats.st_size,
        created_at=utc_iso_string(timestamp_to_utc(created)),
    )


def collect_output_artifacts(
    output_dir: Path,
    packaging: PackagingConfig | None = None,
    logger: logging.Logger | None = None,
) -> list[OutputArtifact]:
    """Enumerate eligible output files and return them in natural name order."""

    effective_logger = logger or LOGGER
    paths = list_eligible_files(output_dir, packaging, strict=True, logger=effective_logger)

    artifacts: list[OutputArtifact] = []
    for path in paths:
        try:
            artifacts.append(_artifact_from_path(path))
        except OSError as exc:
            raise ArtifactCollectionError(f"cannot stat output file: {exc}", path=path) from exc

    artifacts.sort(key=lambda artifact: natural_sort_key(artifact.file_name))
    effective_logger.debug("collect.artifacts output_dir=%s count=%s", output_dir, len(artifacts))
    return artifacts


def select_preview(
    artifacts: Sequence[OutputArtifact],
    selector: PreviewSelector | None = None,
) -> OutputArtifact:
    """Pick the preview artifact; the first in sorted order unless a selector chooses one."""

    if not artifacts:
        raise NoArtifactsError("No output artifacts found")

    if selector is not None:
        selected = selector(artifacts)
        if selected is not None:
            if selected not in artifacts:
                raise PreviewSelectionError(
                    f"preview selector returned an artifact outside the collected set: {selected.file_name}",
                    path=selected.file_path,
                )
            return selected

    return artifacts[0]
