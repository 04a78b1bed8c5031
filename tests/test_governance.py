import pytest

from output_governance.config import GovernanceConfig
from output_governance.governance import (
    fix_args,
    is_image_output,
    is_sequence_output,
    needs_single_frame_limit,
    pixel_format_args,
    validate_args,
)
from output_governance.governance.ffmpeg import filtergraph_lacks_range, output_path_of


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("frame_%04d.png", True),
        ("frame_%d.jpg", True),
        ("out/%03d.bmp", True),
        ("frame.png", False),
        ("clip_100.mp4", False),
    ],
)
def test_is_sequence_output(path: str, expected: bool) -> None:
    assert is_sequence_output(path) is expected


def test_is_image_output_is_case_insensitive() -> None:
    assert is_image_output("thumb.JPG")
    assert is_image_output("scan.tif")
    assert not is_image_output("clip.mp4")
    assert not is_image_output("no_extension")


def test_needs_single_frame_limit_only_for_single_image_files() -> None:
    assert needs_single_frame_limit("thumb.png")
    assert not needs_single_frame_limit("frame_%04d.png")
    assert not needs_single_frame_limit("clip.mp4")


def test_pixel_format_args_for_image_target() -> None:
    assert pixel_format_args("jpg") == ["-pix_fmt", "yuv420p", "-color_range", "pc"]
    assert pixel_format_args("out.png") == ["-pix_fmt", "yuv420p", "-color_range", "pc"]


def test_pixel_format_args_empty_for_non_image_target() -> None:
    assert pixel_format_args("mp4") == []
    assert pixel_format_args("mp4", has_scale=True) == []


def test_pixel_format_args_with_scale() -> None:
    assert pixel_format_args("png", has_scale=True) == [
        "-vf",
        "scale=in_range=pc:out_range=pc",
        "-pix_fmt",
        "yuv420p",
        "-color_range",
        "pc",
    ]


def test_pixel_format_args_appends_scale_to_existing_filter() -> None:
    args = pixel_format_args("png", has_scale=True, existing_filter="crop=100:100")
    assert args[:2] == ["-vf", "crop=100:100,scale=in_range=pc:out_range=pc"]


def test_validate_reports_deprecated_pixel_format_as_error() -> None:
    report = validate_args(["-i", "in.mp4", "-pix_fmt", "yuvj420p", "-frames:v", "1", "out.jpg"])

    assert not report.valid
    assert len(report.errors) == 1
    assert "yuvj420p" in report.errors[0]
    assert "yuv420p" in report.errors[0]
    assert report.kinds() == {"deprecated_pixel_format"}


def test_fix_replaces_deprecated_format_and_adds_color_range() -> None:
    args = ["-i", "in.mp4", "-pix_fmt", "yuvj420p", "-frames:v", "1", "out.jpg"]

    fixed = fix_args(args)

    assert fixed == ["-i", "in.mp4", "-pix_fmt", "yuv420p", "-color_range", "pc", "-frames:v", "1", "out.jpg"]
    assert validate_args(fixed).errors == []


def test_fix_keeps_existing_color_range() -> None:
    fixed = fix_args(["-i", "in.mov", "-pix_fmt", "yuvj422p", "-color_range", "tv", "out.mp4"])

    assert fixed == ["-i", "in.mov", "-pix_fmt", "yuv422p", "-color_range", "tv", "out.mp4"]


def test_scale_without_range_is_a_warning_and_gets_fixed() -> None:
    args = ["-i", "in.mp4", "-vf", "scale=640:-1", "-frames:v", "1", "out.png"]

    report = validate_args(args)
    fixed = fix_args(args)

    assert report.valid
    assert report.kinds() == {"scale_without_range"}
    assert fixed[fixed.index("-vf") + 1] == "scale=640:-1:in_range=pc:out_range=pc"
    assert validate_args(fixed).warnings == []


def test_fix_rewrites_scale_inside_labelled_chain() -> None:
    fixed = fix_args(["-i", "in.mp4", "-vf", "[0:v]crop=10:10,scale=320:240[out]", "clip.mp4"])

    assert fixed[3] == "[0:v]crop=10:10,scale=320:240:in_range=pc:out_range=pc[out]"


def test_scale_with_explicit_range_is_clean() -> None:
    assert not filtergraph_lacks_range("scale=in_range=pc:out_range=pc")
    assert filtergraph_lacks_range("fps=1,scale=320:-1")
    assert not filtergraph_lacks_range("fps=1")


def test_missing_frame_limit_for_single_image_output() -> None:
    args = ["-i", "in.mp4", "out.png"]

    report = validate_args(args)

    assert report.kinds() == {"missing_frame_limit"}
    assert fix_args(args) == ["-i", "in.mp4", "-frames:v", "1", "out.png"]


@pytest.mark.parametrize("flag", ["-frames:v", "-vframes", "-frames"])
def test_any_frame_limit_alias_satisfies_rule(flag: str) -> None:
    args = ["-i", "in.mp4", flag, "1", "out.png"]

    assert validate_args(args).warnings == []
    assert fix_args(args) == args


def test_sequence_output_needs_no_frame_limit() -> None:
    args = ["-i", "in.mp4", "frame_%04d.png"]

    assert validate_args(args).issues == ()
    assert fix_args(args) == args


@pytest.mark.parametrize(
    "args",
    [
        ["-i", "in.mp4", "-pix_fmt", "yuvj420p", "out.jpg"],
        ["-i", "in.mp4", "-vf", "scale=640:-1", "thumb.png"],
        ["-i", "in.mp4", "-pix_fmt:v", "yuvj444p", "-vf", "fps=1,scale=w=320:h=-1", "frame_%04d.png"],
        ["-i", "in.mp4", "-c:v", "libx264", "clip.mp4"],
        ["-i", "in.mp4", "-filter:v", "scale='min(640,iw)':-2", "out.webp"],
    ],
)
def test_fix_is_idempotent(args: list[str]) -> None:
    once = fix_args(args)

    assert fix_args(once) == once
    assert validate_args(once).valid


def test_fix_does_not_mutate_input() -> None:
    args = ["-i", "in.mp4", "-pix_fmt", "yuvj420p", "out.jpg"]
    snapshot = list(args)

    fix_args(args)

    assert args == snapshot


@pytest.mark.parametrize("args", [[], ["-pix_fmt"], ["-vf"], ["-y"]])
def test_malformed_args_never_raise(args: list[str]) -> None:
    assert validate_args(args).valid
    assert fix_args(args) == args


def test_output_path_of_ignores_trailing_flag() -> None:
    assert output_path_of(["-i", "in.mp4", "out.png"]) == "out.png"
    assert output_path_of(["-i", "in.mp4", "-y"]) is None
    assert output_path_of([]) is None


def test_custom_config_changes_frame_limit_flag() -> None:
    config = GovernanceConfig(frame_limit_flag="-vframes")

    assert fix_args(["-i", "in.mp4", "out.png"], config) == ["-i", "in.mp4", "-vframes", "1", "out.png"]


def test_report_as_dict_shape() -> None:
    payload = validate_args(["-i", "in.mp4", "-pix_fmt", "yuvj420p", "out.png"]).as_dict()

    assert payload["valid"] is False
    assert len(payload["errors"]) == 1
    assert len(payload["warnings"]) == 1


@pytest.mark.parametrize("stage", ["scale_cuda=1280:720", "scale_vaapi=w=640:h=360"])
def test_hardware_scale_variants_warn_but_are_not_rewritten(stage: str) -> None:
    args = ["-i", "in.mp4", "-vf", stage, "clip.mp4"]

    assert validate_args(args).kinds() == {"scale_without_range"}
    assert fix_args(args) == args


def test_scale_like_filter_names_are_not_scale_stages() -> None:
    assert not filtergraph_lacks_range("zscale=t=linear")
    assert not filtergraph_lacks_range("scale2ref=iw:ih")
