"""Naming-pattern hints and per-engine multi-output traits.

These only suggest a task type or an output naming pattern. They never decide
whether a job is multi-output; `classify_output_dir` counts files for that.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from output_governance.packaging.models import TaskType

MULTI_OUTPUT_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "sequence": (
        re.compile(r"%\d*d"),
        re.compile(r"_\d{2,4}\."),
        re.compile(r"-\d{2,4}\."),
    ),
    "pages": (
        re.compile(r"page[-_]?\d+", re.IGNORECASE),
        re.compile(r"(?<![a-z])p[-_]?\d+", re.IGNORECASE),
    ),
    "frames": (
        re.compile(r"frame[-_]?\d+", re.IGNORECASE),
        re.compile(r"(?<![a-z])f[-_]?\d+", re.IGNORECASE),
    ),
    "split": (
        re.compile(r"chunk[-_]?\d+", re.IGNORECASE),
        re.compile(r"part[-_]?\d+", re.IGNORECASE),
        re.compile(r"shard[-_]?\d+", re.IGNORECASE),
        re.compile(r"segment[-_]?\d+", re.IGNORECASE),
    ),
    "tiles": (
        re.compile(r"tile[-_]?\d+", re.IGNORECASE),
        re.compile(r"block[-_]?\d+", re.IGNORECASE),
    ),
}

# Checked in order; the first family matching every name wins.
_FAMILY_TASK_TYPES: tuple[tuple[str, TaskType], ...] = (
    ("pages", "pages"),
    ("split", "split"),
    ("tiles", "split"),
    ("frames", "sequence"),
    ("sequence", "sequence"),
)


@dataclass(frozen=True, slots=True)
class EngineMultiOutputConfig:
    """How a converter engine tends to produce multiple outputs."""

    name: str
    can_produce_multi_output: bool
    triggers: tuple[str, ...] = field(default_factory=tuple)
    output_pattern: str | None = None


ENGINE_MULTI_OUTPUT_CONFIG: dict[str, EngineMultiOutputConfig] = {
    "ffmpeg": EngineMultiOutputConfig(
        name="FFmpeg",
        can_produce_multi_output=True,
        triggers=("image2", "sequence", "%d", "fps", "frame", "-r"),
        output_pattern="%04d",
    ),
    "imagemagick": EngineMultiOutputConfig(
        name="ImageMagick",
        can_produce_multi_output=True,
        triggers=("[", "]", "-scene", "-adjoin"),
        output_pattern="-%04d",
    ),
    "graphicsmagick": EngineMultiOutputConfig(
        name="GraphicsMagick",
        can_produce_multi_output=True,
        triggers=("[", "]", "-scene", "+adjoin"),
        output_pattern="-%04d",
    ),
    "libreoffice": EngineMultiOutputConfig(
        name="LibreOffice",
        can_produce_multi_output=True,
        triggers=("pdf", "pages"),
        output_pattern="_page_%04d",
    ),
    "pandoc": EngineMultiOutputConfig(
        name="Pandoc",
        can_produce_multi_output=True,
        triggers=("--split-level", "--epub-chapter"),
        output_pattern="chapter_%03d",
    ),
    "pdfpackager": EngineMultiOutputConfig(
        name="PDF Packager",
        can_produce_multi_output=True,
        triggers=("png-*", "jpg-*", "jpeg-*", "all-*"),
        output_pattern="page_%04d",
    ),
    # Already bundles its own tar, so no naming pattern.
    "mineru": EngineMultiOutputConfig(
        name="MinerU",
        can_produce_multi_output=True,
        triggers=("md-t", "md-i"),
    ),
    "assimp": EngineMultiOutputConfig(
        name="Assimp",
        can_produce_multi_output=True,
        triggers=("multi-mesh", "scene"),
        output_pattern="mesh_%03d",
    ),
}


def matches_family(file_name: str, family: str) -> bool:
    """Return True when the name matches any pattern of a naming family."""

    return any(pattern.search(file_name) for pattern in MULTI_OUTPUT_PATTERNS.get(family, ()))


def suggest_task_type(file_names: Iterable[str]) -> TaskType:
    """Guess a manifest task type from output names."""

    names = list(file_names)
    if len(names) <= 1:
        return "single-output"
    for family, task_type in _FAMILY_TASK_TYPES:
        if all(matches_family(name, family) for name in names):
            return task_type
    return "multi-output"


def engine_output_pattern(engine: str) -> str | None:
    """Return the preferred numbered-output pattern for an engine, if known."""

    config = ENGINE_MULTI_OUTPUT_CONFIG.get(engine.strip().lower())
    return config.output_pattern if config else None


def can_produce_multi_output(engine: str) -> bool:
    config = ENGINE_MULTI_OUTPUT_CONFIG.get(engine.strip().lower())
    return bool(config and config.can_produce_multi_output)
