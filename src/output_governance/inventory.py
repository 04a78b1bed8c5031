"""Tabular inventory of a job's output artifacts."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Sequence

import polars as pl

from output_governance.packaging.models import OutputArtifact
from output_governance.utils.paths import atomic_temp_path

LOGGER = logging.getLogger(__name__)


def _inventory_schema() -> dict[str, pl.DataType]:
    """Stable schema for artifact inventories."""

    return {
        "position": pl.Int64,
        "file_name": pl.String,
        "file_path": pl.String,
        "format": pl.String,
        "size_bytes": pl.Int64,
        "created_at": pl.Datetime(time_zone="UTC"),
        "is_preview": pl.Boolean,
    }


def empty_inventory() -> pl.DataFrame:
    """Return an empty inventory frame with stable schema."""

    return pl.DataFrame(schema=_inventory_schema())


def artifact_inventory(
    artifacts: Sequence[OutputArtifact],
    preview_name: str | None = None,
) -> pl.DataFrame:
    """Build an inventory frame keeping the artifacts' packaging order."""

    if not artifacts:
        return empty_inventory()

    rows: list[dict[str, object]] = []
    for position, artifact in enumerate(artifacts):
        rows.append(
            {
                "position": position,
                "file_name": artifact.file_name,
                "file_path": str(artifact.file_path),
                "format": artifact.format,
                "size_bytes": artifact.size,
                "created_at": datetime.fromisoformat(artifact.created_at.replace("Z", "+00:00")),
                "is_preview": preview_name is not None and artifact.file_name == preview_name,
            }
        )
    return pl.DataFrame(rows, schema_overrides=_inventory_schema())


def format_counts(inventory: pl.DataFrame) -> dict[str, int]:
    """Return artifact counts per format."""

    if inventory.height == 0 or "format" not in inventory.columns:
        return {}
    result: dict[str, int] = {}
    for row in inventory.group_by("format").len(name="count").to_dicts():
        result[str(row["format"])] = int(row["count"])
    return dict(sorted(result.items()))


def total_size_bytes(inventory: pl.DataFrame) -> int:
    if inventory.height == 0:
        return 0
    return int(inventory.select(pl.col("size_bytes").sum()).item())


def write_inventory_parquet(inventory: pl.DataFrame, output_path: Path) -> Path:
    """Write the inventory to parquet atomically and return the output path."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = atomic_temp_path(output_path)
    try:
        inventory.write_parquet(temp_path)
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    LOGGER.debug("inventory.written path=%s rows=%s", output_path, inventory.height)
    return output_path
