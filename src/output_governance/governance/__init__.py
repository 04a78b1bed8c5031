"""Encoder argument governance: pixel formats, scale ranges, and frame limits."""

from output_governance.governance.builder import (
    FixedArgs,
    GovernanceDecision,
    build_governed_args,
    count_output_files,
    decide_governance,
    sequence_output_path,
    validate_and_fix_args,
)
from output_governance.governance.ffmpeg import (
    ArgsValidation,
    GovernanceIssue,
    fix_args,
    is_image_output,
    is_sequence_output,
    needs_single_frame_limit,
    pixel_format_args,
    validate_args,
)

__all__ = [
    "ArgsValidation",
    "GovernanceIssue",
    "is_sequence_output",
    "is_image_output",
    "needs_single_frame_limit",
    "pixel_format_args",
    "validate_args",
    "fix_args",
    "FixedArgs",
    "GovernanceDecision",
    "decide_governance",
    "validate_and_fix_args",
    "build_governed_args",
    "sequence_output_path",
    "count_output_files",
]
