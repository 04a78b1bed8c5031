import logging
from pathlib import Path

import pytest

from output_governance.governance import validate_and_fix_args, validate_args
from output_governance.governance.builder import (
    build_governed_args,
    count_output_files,
    decide_governance,
    sequence_output_path,
)


def test_sequence_output_path_adds_placeholder() -> None:
    assert sequence_output_path("out/frame.png") == "out/frame_%04d.png"
    assert sequence_output_path("frame.png", digits=3) == "frame_%03d.png"


def test_sequence_output_path_keeps_existing_placeholder() -> None:
    assert sequence_output_path("frame_%05d.png") == "frame_%05d.png"


def test_validate_and_fix_appends_output_and_injects_governance() -> None:
    fixed = validate_and_fix_args("thumb.jpg", "jpg", ["-i", "in.mp4", "-ss", "5"])

    assert fixed.args == (
        "-i",
        "in.mp4",
        "-ss",
        "5",
        "-pix_fmt",
        "yuv420p",
        "-color_range",
        "pc",
        "-frames:v",
        "1",
        "thumb.jpg",
    )
    assert fixed.decision.inject_frame_limit
    assert fixed.decision.inject_pixel_format
    assert fixed.before.kinds() == {"missing_frame_limit"}
    assert fixed.valid
    assert fixed.after.warnings == []


def test_validate_and_fix_does_not_duplicate_output_path() -> None:
    fixed = validate_and_fix_args("frame_%04d.png", "png", ["-i", "in.mp4", "frame_%04d.png"])

    assert fixed.args.count("frame_%04d.png") == 1
    assert fixed.args[-1] == "frame_%04d.png"
    assert "-frames:v" not in fixed.args


def test_validate_and_fix_replaces_deprecated_format_for_video() -> None:
    fixed = validate_and_fix_args("clip.mp4", "mp4", ["-i", "in.mov", "-pix_fmt", "yuvj420p", "clip.mp4"])

    assert not fixed.before.valid
    assert fixed.valid
    assert fixed.decision.replace_pixel_format
    assert not fixed.decision.inject_pixel_format
    assert fixed.args == ("-i", "in.mov", "-pix_fmt", "yuv420p", "-color_range", "pc", "clip.mp4")


def test_validate_and_fix_uses_path_when_format_is_not_an_image() -> None:
    fixed = validate_and_fix_args("cover.png", "video", ["-i", "in.mp4"])

    assert "-pix_fmt" in fixed.args
    assert fixed.after.warnings == []


def test_validate_and_fix_respects_existing_color_range() -> None:
    fixed = validate_and_fix_args("thumb.png", "png", ["-i", "in.mp4", "-color_range", "tv"])

    assert fixed.args.count("-color_range") == 1
    assert fixed.args[fixed.args.index("-color_range") + 1] == "tv"
    assert "-pix_fmt" in fixed.args


def test_validate_and_fix_logs_changes(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.builder")

    with caplog.at_level(logging.INFO, logger="tests.builder"):
        validate_and_fix_args("thumb.jpg", "jpg", ["-i", "in.mp4"], logger=logger)

    assert any("governance.args_fixed" in record.getMessage() for record in caplog.records)


def test_decide_governance_for_clean_video_needs_nothing() -> None:
    decision = decide_governance("clip.mp4", "mp4", ["-i", "in.mp4", "-c:v", "libx264", "clip.mp4"])

    assert not decision.changes_required


def test_build_governed_args_for_scaled_image() -> None:
    args = build_governed_args("in.mp4", "thumb.png", video_filter="scale=320:-1", has_scale=True)

    assert args[:2] == ["-i", "in.mp4"]
    assert args[-1] == "thumb.png"
    assert args.count("-vf") == 1
    assert "-frames:v" in args
    assert validate_args(args).issues == ()


def test_build_governed_args_for_video_keeps_filter() -> None:
    args = build_governed_args("in.mp4", "clip.mp4", video_filter="fps=10")

    assert args == ["-i", "in.mp4", "-vf", "fps=10", "clip.mp4"]


def test_build_governed_args_does_not_duplicate_pixel_format() -> None:
    args = build_governed_args("in.mp4", "thumb.jpg", base_args=["-pix_fmt", "yuvj420p"])

    assert args.count("-pix_fmt") == 1
    assert args[args.index("-pix_fmt") + 1] == "yuv420p"
    assert validate_args(args).valid


def test_count_output_files_ignores_manifest_hidden_and_packages(tmp_path: Path) -> None:
    for name in ("a.png", "b.png", "manifest.json", ".hidden", "old.tra"):
        (tmp_path / name).write_text("x", encoding="utf-8")
    (tmp_path / "nested").mkdir()

    assert count_output_files(tmp_path) == 2
