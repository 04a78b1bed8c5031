"""Typed containers shared by the packaging stages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Literal, Mapping, Sequence

if TYPE_CHECKING:
    from output_governance.packaging.manifest import Manifest

TaskType = Literal["single-output", "multi-output", "sequence", "batch", "split", "pages"]
TASK_TYPES: tuple[TaskType, ...] = ("single-output", "multi-output", "sequence", "batch", "split", "pages")

DEFAULT_PACKAGE_NOTE = "Auto-packaged due to multiple outputs"


@dataclass(frozen=True, slots=True)
class OutputArtifact:
    """One physical output file of a conversion job."""

    file_name: str
    file_path: Path
    format: str
    size: int
    created_at: str
    metadata: Mapping[str, Any] | None = None

    def relocated(self, new_path: Path) -> "OutputArtifact":
        """Return the same artifact pointing at a copied location."""

        return replace(self, file_path=new_path)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "file_name": self.file_name,
            "file_path": str(self.file_path),
            "format": self.format,
            "size": self.size,
            "created_at": self.created_at,
        }
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


PreviewSelector = Callable[[Sequence[OutputArtifact]], "OutputArtifact | None"]


@dataclass(frozen=True, slots=True)
class OutputClassification:
    """Single- vs multi-output verdict for one output directory."""

    is_multi: bool
    file_count: int
    reason: str | None = None
    file_names: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PackageOptions:
    """Per-job packaging inputs supplied by the job context."""

    job_id: str
    engine: str
    source_format: str
    output_format: str
    metadata: Mapping[str, Any] | None = None
    task_type: TaskType = "multi-output"
    note: str | None = DEFAULT_PACKAGE_NOTE
    preview_selector: PreviewSelector | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class CanonicalStructure:
    """A materialized {preview, artifacts/, manifest} layout."""

    root: Path
    preview_path: Path
    artifacts_dir: Path
    manifest_path: Path
    artifacts: tuple[OutputArtifact, ...]
    manifest: "Manifest"

    @property
    def artifact_count(self) -> int:
        return len(self.artifacts)


@dataclass(frozen=True, slots=True)
class PackageResult:
    """Outcome of a successful governed packaging run."""

    package_path: Path
    manifest: "Manifest"
    staging_dir: Path
    classification: OutputClassification | None = None
