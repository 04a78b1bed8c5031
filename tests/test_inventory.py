from pathlib import Path

import polars as pl

from output_governance.inventory import (
    artifact_inventory,
    empty_inventory,
    format_counts,
    total_size_bytes,
    write_inventory_parquet,
)
from output_governance.packaging import collect_output_artifacts


def test_inventory_keeps_packaging_order(make_output_dir) -> None:
    artifacts = collect_output_artifacts(make_output_dir(["img_10.png", "img_2.png", "cover.jpg"]))

    inventory = artifact_inventory(artifacts, preview_name="cover.jpg")

    assert inventory.height == 3
    assert inventory["file_name"].to_list() == ["cover.jpg", "img_2.png", "img_10.png"]
    assert inventory["position"].to_list() == [0, 1, 2]
    assert inventory.filter(pl.col("is_preview"))["file_name"].to_list() == ["cover.jpg"]
    assert inventory.schema["created_at"] == pl.Datetime(time_zone="UTC")


def test_format_counts_and_total_size(make_output_dir) -> None:
    artifacts = collect_output_artifacts(make_output_dir(["a.png", "b.png", "c.jpg"]))
    inventory = artifact_inventory(artifacts)

    assert format_counts(inventory) == {"jpg": 1, "png": 2}
    assert total_size_bytes(inventory) == sum(artifact.size for artifact in artifacts)


def test_empty_inventory_has_stable_schema() -> None:
    inventory = artifact_inventory([])

    assert inventory.height == 0
    assert inventory.columns == empty_inventory().columns
    assert format_counts(inventory) == {}
    assert total_size_bytes(inventory) == 0


def test_write_inventory_parquet(make_output_dir, tmp_path: Path) -> None:
    inventory = artifact_inventory(collect_output_artifacts(make_output_dir(["a.png", "b.png"])))

    path = write_inventory_parquet(inventory, tmp_path / "reports" / "inventory.parquet")

    assert path.exists()
    assert pl.read_parquet(path).height == 2
    assert [p.name for p in path.parent.iterdir()] == ["inventory.parquet"]
