"""Typed errors raised by the packaging pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

PackagingStage = Literal["classify", "collect", "select-preview", "materialize", "serialize"]
PACKAGING_STAGES: tuple[PackagingStage, ...] = (
    "classify",
    "collect",
    "select-preview",
    "materialize",
    "serialize",
)


class PackagingError(RuntimeError):
    """Packaging failed at a named stage.

    Callers match on the subclass or on ``stage``; the message is for humans only.
    """

    stage: PackagingStage = "serialize"

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        base = super().__str__()
        if self.path is None:
            return f"[{self.stage}] {base}"
        return f"[{self.stage}] {base} (path={self.path})"


class ClassificationError(PackagingError):
    """Output directory could not be inspected."""

    stage: PackagingStage = "classify"


class ArtifactCollectionError(PackagingError):
    """Output files could not be enumerated or stat'ed."""

    stage: PackagingStage = "collect"


class PreviewSelectionError(PackagingError):
    """No preview artifact could be chosen."""

    stage: PackagingStage = "select-preview"


class NoArtifactsError(PreviewSelectionError):
    """The source directory held no eligible artifacts."""


class MaterializeError(PackagingError):
    """Canonical structure could not be written."""

    stage: PackagingStage = "materialize"


class SerializeError(PackagingError):
    """Canonical structure or directory could not be archived."""

    stage: PackagingStage = "serialize"


class ArchiveFormatError(ValueError):
    """Raised when a file name cannot carry a sanctioned archive extension."""
