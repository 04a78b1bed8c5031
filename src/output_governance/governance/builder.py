"""Assemble governed encoder argument lists before a converter runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Sequence

from output_governance.config import DEFAULT_GOVERNANCE, GovernanceConfig, PackagingConfig
from output_governance.governance.ffmpeg import (
    COLOR_RANGE_FLAGS,
    PIXEL_FORMAT_FLAGS,
    VIDEO_FILTER_FLAGS,
    ArgsValidation,
    filtergraph_lacks_range,
    fix_args,
    has_frame_limit,
    is_image_format,
    is_sequence_output,
    needs_single_frame_limit,
    pixel_format_args,
    validate_args,
)
from output_governance.packaging.classify import list_eligible_files

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GovernanceDecision:
    """Which corrective arguments an invocation needs."""

    inject_frame_limit: bool
    inject_pixel_format: bool
    replace_pixel_format: bool
    augment_filter: bool

    @property
    def changes_required(self) -> bool:
        return self.inject_frame_limit or self.inject_pixel_format or self.replace_pixel_format or self.augment_filter


@dataclass(frozen=True, slots=True)
class FixedArgs:
    """Governed argument list plus the validation before and after fixing."""

    args: tuple[str, ...]
    decision: GovernanceDecision
    before: ArgsValidation
    after: ArgsValidation

    @property
    def valid(self) -> bool:
        return self.after.valid


def sequence_output_path(
    output_path: str | PurePath,
    digits: int | None = None,
    config: GovernanceConfig | None = None,
) -> str:
    """Turn `frame.png` into `frame_%04d.png`; sequence paths are returned unchanged."""

    cfg = config or DEFAULT_GOVERNANCE
    text = str(output_path)
    if is_sequence_output(text):
        return text
    width = digits or cfg.sequence_digits
    path = PurePath(text)
    return str(path.with_name(f"{path.stem}_%0{width}d{path.suffix}"))


def count_output_files(output_dir: Path, packaging: PackagingConfig | None = None) -> int:
    """Count deliverable files in a converter output directory."""

    return len(list_eligible_files(output_dir, packaging=packaging))


def _has_flag(args: Sequence[str], flags: Sequence[str]) -> bool:
    return any(arg in flags for arg in args)


def decide_governance(
    output_path: str,
    output_format: str,
    args: Sequence[str],
    config: GovernanceConfig | None = None,
) -> GovernanceDecision:
    """Decide which corrections the argument list needs for the requested output."""

    cfg = config or DEFAULT_GOVERNANCE
    image_target = is_image_format(output_format, cfg) or is_image_format(output_path, cfg)

    replace_pixel_format = False
    augment_filter = False
    for index, arg in enumerate(args[:-1]):
        value = args[index + 1]
        if arg in PIXEL_FORMAT_FLAGS and cfg.replacement_for(value) is not None:
            replace_pixel_format = True
        elif arg in VIDEO_FILTER_FLAGS and filtergraph_lacks_range(value):
            augment_filter = True

    return GovernanceDecision(
        inject_frame_limit=needs_single_frame_limit(output_path, cfg) and not has_frame_limit(args, cfg),
        inject_pixel_format=image_target and not _has_flag(args, PIXEL_FORMAT_FLAGS),
        replace_pixel_format=replace_pixel_format,
        augment_filter=augment_filter,
    )


def validate_and_fix_args(
    intended_output_path: str | PurePath,
    output_format: str,
    base_args: Sequence[str],
    *,
    config: GovernanceConfig | None = None,
    logger: logging.Logger | None = None,
) -> FixedArgs:
    """Return the governed argument list a converter should be invoked with.

    The intended output path is appended when `base_args` does not already end
    with it. Image targets without a pixel format get the standard full-range
    format before the output path, then `fix_args` applies the remaining rules.
    """

    effective_logger = logger or LOGGER
    cfg = config or DEFAULT_GOVERNANCE
    output_path = str(intended_output_path)

    args = list(base_args)
    if not args or args[-1] != output_path:
        args.append(output_path)

    before = validate_args(args, cfg)
    decision = decide_governance(output_path, output_format, args, cfg)
    if decision.inject_pixel_format:
        target_format = output_format if is_image_format(output_format, cfg) else output_path
        injected = pixel_format_args(target_format, config=cfg)
        if _has_flag(args, COLOR_RANGE_FLAGS):
            injected = injected[:2]
        args[-1:-1] = injected

    fixed = fix_args(args, cfg)
    after = validate_args(fixed, cfg)

    if decision.changes_required:
        effective_logger.info(
            "governance.args_fixed output=%s frame_limit=%s pixel_format=%s replaced=%s filter=%s",
            output_path,
            decision.inject_frame_limit,
            decision.inject_pixel_format,
            decision.replace_pixel_format,
            decision.augment_filter,
        )
    for message in after.warnings:
        effective_logger.warning("governance.remaining_warning output=%s message=%s", output_path, message)

    return FixedArgs(args=tuple(fixed), decision=decision, before=before, after=after)


def build_governed_args(
    input_path: str | PurePath,
    output_path: str | PurePath,
    *,
    base_args: Sequence[str] = (),
    video_filter: str | None = None,
    has_scale: bool = False,
    output_format: str | None = None,
    config: GovernanceConfig | None = None,
) -> list[str]:
    """Assemble a complete `-i <input> ... <output>` encoder argument list."""

    cfg = config or DEFAULT_GOVERNANCE
    target = str(output_path)
    fmt = output_format or target

    args: list[str] = ["-i", str(input_path), *base_args]
    pixel_args: list[str] = []
    if not _has_flag(base_args, PIXEL_FORMAT_FLAGS):
        pixel_args = pixel_format_args(fmt, has_scale=has_scale, existing_filter=video_filter, config=cfg)
    if video_filter and "-vf" not in pixel_args:
        args.extend(["-vf", video_filter])
    args.extend(pixel_args)
    args.append(target)
    return fix_args(args, cfg)
