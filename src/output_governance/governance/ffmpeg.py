"""Pixel-format and frame-count governance for encoder argument lists.

Every function here is pure: it classifies paths or rewrites argument lists and
never raises on malformed input. Whether a reported error blocks a job is the
caller's decision.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable, Literal, Sequence

from output_governance.config import DEFAULT_GOVERNANCE, GovernanceConfig

SEQUENCE_PLACEHOLDER = re.compile(r"%\d*d")

PIXEL_FORMAT_FLAGS: tuple[str, ...] = ("-pix_fmt", "-pix_fmt:v")
COLOR_RANGE_FLAGS: tuple[str, ...] = ("-color_range", "-color_range:v")
VIDEO_FILTER_FLAGS: tuple[str, ...] = ("-vf", "-filter:v")

_LEADING_LABELS = re.compile(r"^(?:\s*\[[^\]]*\])*\s*")
_TRAILING_LABELS = re.compile(r"\s*(?:\[[^\]]*\]\s*)*$")

GovernanceIssueKind = Literal["deprecated_pixel_format", "scale_without_range", "missing_frame_limit"]
GovernanceSeverity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class GovernanceIssue:
    """One governance finding for an argument list."""

    kind: GovernanceIssueKind
    severity: GovernanceSeverity
    message: str
    token: str | None = None


@dataclass(frozen=True, slots=True)
class ArgsValidation:
    """Validation report for one argument list."""

    issues: tuple[GovernanceIssue, ...] = ()

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    @property
    def valid(self) -> bool:
        return not self.errors

    def kinds(self) -> set[GovernanceIssueKind]:
        return {issue.kind for issue in self.issues}

    def as_dict(self) -> dict[str, object]:
        """Return the `{valid, warnings, errors}` view of the report."""

        return {"valid": self.valid, "warnings": self.warnings, "errors": self.errors}


def _extension_token(value: str) -> str:
    """Lowercase extension of a path, without the dot."""

    return PurePath(value).suffix.lower().lstrip(".")


def _format_token(value: str) -> str:
    """Normalize a bare format (`jpg`, `.jpg`) or a path (`out.jpg`) to `jpg`."""

    text = value.strip()
    token = _extension_token(text)
    if token:
        return token
    return text.lower().lstrip(".")


def is_sequence_output(path: str | PurePath) -> bool:
    """Return True when the path carries a printf-style frame number placeholder."""

    return SEQUENCE_PLACEHOLDER.search(str(path)) is not None


def is_image_output(path: str | PurePath, config: GovernanceConfig | None = None) -> bool:
    """Return True when the path's extension is a still-image format."""

    cfg = config or DEFAULT_GOVERNANCE
    return _extension_token(str(path)) in set(cfg.image_formats)


def is_image_format(output_format: str, config: GovernanceConfig | None = None) -> bool:
    """Return True when a bare format or a path names a still-image format."""

    cfg = config or DEFAULT_GOVERNANCE
    return _format_token(output_format) in set(cfg.image_formats)


def needs_single_frame_limit(path: str | PurePath, config: GovernanceConfig | None = None) -> bool:
    """Return True for single-file image outputs, which must be capped to one frame."""

    if is_sequence_output(path):
        return False
    return is_image_output(path, config)


def has_frame_limit(args: Sequence[str], config: GovernanceConfig | None = None) -> bool:
    """Return True when any frame-count limiter flag is present."""

    cfg = config or DEFAULT_GOVERNANCE
    flags = {cfg.frame_limit_flag, *cfg.frame_limit_aliases}
    return any(arg in flags for arg in args)


def output_path_of(args: Sequence[str]) -> str | None:
    """Return the trailing output path of an argument list, if it has one."""

    if not args:
        return None
    candidate = args[-1]
    if not candidate or candidate.startswith("-"):
        return None
    return candidate


def pixel_format_args(
    output_format: str,
    has_scale: bool = False,
    existing_filter: str | None = None,
    config: GovernanceConfig | None = None,
) -> list[str]:
    """Return arguments forcing a full-range, non-deprecated pixel format for image targets.

    When scaling is involved the range-preserving scale stage is appended to
    `existing_filter` so earlier filter stages keep their order.
    """

    cfg = config or DEFAULT_GOVERNANCE
    if not is_image_format(output_format, cfg):
        return []

    args: list[str] = []
    if has_scale and existing_filter:
        args.extend(["-vf", f"{existing_filter},{cfg.scale_filter}"])
    elif has_scale:
        args.extend(["-vf", cfg.scale_filter])

    args.extend(["-pix_fmt", cfg.standard_pixel_format])
    args.extend(["-color_range", cfg.standard_color_range])
    return args


def _split_filtergraph(graph: str) -> list[tuple[str, str]]:
    """Split a filtergraph into (stage, separator) pairs, honouring quotes and escapes."""

    parts: list[tuple[str, str]] = []
    current: list[str] = []
    quoted = False
    escaped = False
    for char in graph:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\":
            current.append(char)
            escaped = True
            continue
        if char == "'":
            quoted = not quoted
            current.append(char)
            continue
        if char in ",;" and not quoted:
            parts.append(("".join(current), char))
            current = []
            continue
        current.append(char)
    parts.append(("".join(current), ""))
    return parts


def _split_stage(stage: str) -> tuple[str, str, str, str]:
    """Split one filter stage into (input labels, name, options, output labels)."""

    leading = _LEADING_LABELS.match(stage)
    head = leading.group(0) if leading else ""
    rest = stage[len(head) :]
    trailing = _TRAILING_LABELS.search(rest)
    tail = trailing.group(0) if trailing else ""
    body = rest[: len(rest) - len(tail)] if tail else rest
    name, _, options = body.partition("=")
    return head, name.strip(), options, tail


def _option_keys(options: str) -> set[str]:
    return {part.partition("=")[0].strip() for part in options.split(":") if part}


def _is_scale_family(name: str) -> bool:
    """`scale` and its hardware variants (`scale_cuda`, `scale_vaapi`, ...)."""

    return name == "scale" or name.startswith("scale_")


def _scale_stage_lacks_range(stage: str) -> bool:
    _, name, options, _ = _split_stage(stage)
    if not _is_scale_family(name):
        return False
    keys = _option_keys(options)
    return "in_range" not in keys or "out_range" not in keys


def _with_scale_range(stage: str, color_range: str) -> str:
    """Add explicit in/out range options to a scale stage that lacks them.

    Hardware scale variants are reported by `validate_args` but left as they
    are: they do not all accept `in_range`/`out_range`.
    """

    head, name, options, tail = _split_stage(stage)
    if name != "scale" or not _scale_stage_lacks_range(stage):
        return stage
    keys = _option_keys(options)
    additions = [f"{key}={color_range}" for key in ("in_range", "out_range") if key not in keys]
    merged = ":".join([options, *additions]) if options else ":".join(additions)
    return f"{head}{name}={merged}{tail}"


def _rewrite_filtergraph(graph: str, rewrite: Callable[[str], str]) -> str:
    return "".join(rewrite(stage) + separator for stage, separator in _split_filtergraph(graph))


def filtergraph_lacks_range(graph: str) -> bool:
    """Return True when any scale-family stage of the filtergraph has no explicit range."""

    return any(_scale_stage_lacks_range(stage) for stage, _ in _split_filtergraph(graph))


def validate_args(args: Sequence[str], config: GovernanceConfig | None = None) -> ArgsValidation:
    """Check an encoder argument list against the governance rules."""

    cfg = config or DEFAULT_GOVERNANCE
    issues: list[GovernanceIssue] = []

    for index, arg in enumerate(args):
        if index + 1 >= len(args):
            break
        value = args[index + 1]
        if arg in PIXEL_FORMAT_FLAGS:
            replacement = cfg.replacement_for(value)
            if replacement is not None:
                issues.append(
                    GovernanceIssue(
                        kind="deprecated_pixel_format",
                        severity="error",
                        message=(
                            f"Deprecated pixel format: {value}. "
                            f"Use {replacement.pix_fmt} with -color_range {replacement.color_range} instead."
                        ),
                        token=value,
                    )
                )
        elif arg in VIDEO_FILTER_FLAGS and filtergraph_lacks_range(value):
            issues.append(
                GovernanceIssue(
                    kind="scale_without_range",
                    severity="warning",
                    message=(
                        "Scale filter detected without color range handling. "
                        f"Consider using: {cfg.scale_filter}"
                    ),
                    token=value,
                )
            )

    output_path = output_path_of(args)
    if output_path is not None and needs_single_frame_limit(output_path, cfg) and not has_frame_limit(args, cfg):
        issues.append(
            GovernanceIssue(
                kind="missing_frame_limit",
                severity="warning",
                message=(
                    f"Image output without {cfg.frame_limit_flag} 1 may produce unexpected results. "
                    f"Consider adding {cfg.frame_limit_flag} 1 for single image output, "
                    f"or use sequence naming (%0{cfg.sequence_digits}d) for multiple frames."
                ),
                token=output_path,
            )
        )

    return ArgsValidation(issues=tuple(issues))


def fix_args(args: Sequence[str], config: GovernanceConfig | None = None) -> list[str]:
    """Return a corrected copy of the argument list.

    Deprecated pixel formats are replaced (with a colour-range flag injected when
    none is present), scale stages gain explicit in/out range, and single-file
    image outputs get a one-frame limiter. Applying it twice equals applying it once.
    """

    cfg = config or DEFAULT_GOVERNANCE
    has_color_range = any(arg in COLOR_RANGE_FLAGS for arg in args)
    fixed: list[str] = []

    index = 0
    while index < len(args):
        arg = args[index]
        has_value = index + 1 < len(args)
        if arg in PIXEL_FORMAT_FLAGS and has_value:
            value = args[index + 1]
            replacement = cfg.replacement_for(value)
            if replacement is None:
                fixed.extend([arg, value])
            else:
                fixed.extend([arg, replacement.pix_fmt])
                if not has_color_range:
                    fixed.extend(["-color_range", replacement.color_range])
                    has_color_range = True
            index += 2
            continue
        if arg in VIDEO_FILTER_FLAGS and has_value:
            graph = _rewrite_filtergraph(
                args[index + 1],
                lambda stage: _with_scale_range(stage, cfg.standard_color_range),
            )
            fixed.extend([arg, graph])
            index += 2
            continue
        fixed.append(arg)
        index += 1

    output_path = output_path_of(fixed)
    if output_path is not None and needs_single_frame_limit(output_path, cfg) and not has_frame_limit(fixed, cfg):
        fixed[-1:-1] = [cfg.frame_limit_flag, "1"]
    return fixed
