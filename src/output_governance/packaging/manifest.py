"""Build, persist, and read back the manifest of a governed package."""

from __future__ import annotations

import json
import logging
import tarfile
from pathlib import Path
from typing import Any, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field

from output_governance.config import DEFAULT_PACKAGING, PackagingConfig
from output_governance.packaging.models import OutputArtifact, PackageOptions, TaskType
from output_governance.utils.paths import write_json_atomically
from output_governance.utils.time_utils import utc_iso_string

LOGGER = logging.getLogger(__name__)

PACKAGED_AS = "archive"

RESERVED_MANIFEST_KEYS: frozenset[str] = frozenset(
    {
        "platform",
        "version",
        "task_type",
        "job_id",
        "engine",
        "source_format",
        "output_format",
        "preview",
        "artifacts_dir",
        "artifact_count",
        "packaged_as",
        "created_at",
    }
)


class Manifest(BaseModel):
    """Structured description of a packaged multi-output result.

    Per-engine metadata is stored exactly as given: the named optional fields
    only document well-known keys and are never coerced, and any other key is
    kept as an extra. Instances are frozen: once written the manifest is the
    single source of truth for the package.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    platform: str
    version: str
    task_type: TaskType = "multi-output"
    job_id: str
    engine: str
    source_format: str
    output_format: str
    preview: str
    artifacts_dir: str
    artifact_count: int = Field(ge=0)
    packaged_as: Literal["archive"] = PACKAGED_AS
    created_at: str
    note: Any = None

    # video
    fps: Any = None
    resolution: Any = None
    color_space: Any = None
    pixel_format: Any = None
    color_range: Any = None

    # paginated documents
    page_count: Any = None
    dpi: Any = None

    # model shards
    shard_count: Any = None

    def to_document(self) -> dict[str, Any]:
        """Return the JSON document form, omitting unset optional fields."""

        return self.model_dump(mode="json", exclude_none=True)

    @property
    def extra_metadata(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


def build_manifest(
    options: PackageOptions,
    artifacts: Sequence[OutputArtifact],
    preview_name: str,
    packaging: PackagingConfig | None = None,
    *,
    created_at: str | None = None,
    logger: logging.Logger | None = None,
) -> Manifest:
    """Assemble the manifest for a set of materialized artifacts.

    Caller metadata is merged after the reserved fields are set; reserved keys
    in the metadata are dropped so they can never override computed values.
    """

    effective_logger = logger or LOGGER
    cfg = packaging or DEFAULT_PACKAGING

    extra: dict[str, Any] = {}
    for key, value in (options.metadata or {}).items():
        if key in RESERVED_MANIFEST_KEYS:
            effective_logger.warning("manifest.reserved_key_dropped job_id=%s key=%s", options.job_id, key)
            continue
        extra[key] = value
    if options.note is not None:
        extra.setdefault("note", options.note)

    manifest = Manifest(
        platform=cfg.platform,
        version=cfg.manifest_version,
        task_type=options.task_type,
        job_id=options.job_id,
        engine=options.engine,
        source_format=options.source_format,
        output_format=options.output_format,
        preview=preview_name,
        artifacts_dir=cfg.artifacts_dir,
        artifact_count=len(artifacts),
        packaged_as=PACKAGED_AS,
        created_at=created_at or utc_iso_string(),
        **extra,
    )
    # Values JSON cannot encode fail here rather than when the manifest is written.
    manifest.to_document()
    return manifest


def write_manifest(manifest: Manifest, output_path: Path) -> Path:
    """Write the manifest as indented JSON, atomically."""

    return write_json_atomically(manifest.to_document(), output_path)


def read_manifest(path: Path, packaging: PackagingConfig | None = None) -> Manifest:
    """Load a manifest from a structure root or a direct file path."""

    cfg = packaging or DEFAULT_PACKAGING
    target = Path(path)
    if target.is_dir():
        target = target / cfg.manifest_file
    return Manifest.model_validate_json(target.read_text(encoding="utf-8"))


def read_package_manifest(package_path: Path, packaging: PackagingConfig | None = None) -> Manifest:
    """Read the manifest straight out of a governed package without unpacking it."""

    cfg = packaging or DEFAULT_PACKAGING
    with tarfile.open(package_path, mode="r:") as archive:
        try:
            member = archive.getmember(cfg.manifest_file)
        except KeyError as exc:
            raise ValueError(f"package has no {cfg.manifest_file}: {package_path}") from exc
        handle = archive.extractfile(member)
        if handle is None:
            raise ValueError(f"{cfg.manifest_file} is not a regular file in {package_path}")
        with handle:
            payload = json.load(handle)
    return Manifest.model_validate(payload)
