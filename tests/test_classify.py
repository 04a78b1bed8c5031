from pathlib import Path

from output_governance.config import PackagingConfig
from output_governance.packaging import classify_output_dir, list_eligible_files


def test_missing_directory_is_single_output(tmp_path: Path) -> None:
    classification = classify_output_dir(tmp_path / "missing")

    assert not classification.is_multi
    assert classification.file_count == 0
    assert classification.reason is None


def test_single_file_is_single_output(make_output_dir) -> None:
    classification = classify_output_dir(make_output_dir(["only.pdf"]))

    assert not classification.is_multi
    assert classification.file_count == 1
    assert classification.file_names == ("only.pdf",)


def test_several_files_are_multi_output(make_output_dir) -> None:
    classification = classify_output_dir(make_output_dir(["a.png", "b.png", "c.png"]))

    assert classification.is_multi
    assert classification.file_count == 3
    assert classification.reason == "Multiple output files: 3"


def test_excluded_entries_do_not_count(make_output_dir) -> None:
    output_dir = make_output_dir(["a.png", "manifest.json", "old.tra", ".DS_Store", "sub/inner.png"])

    classification = classify_output_dir(output_dir)

    assert not classification.is_multi
    assert classification.file_names == ("a.png",)


def test_plain_archives_are_counted_as_outputs(make_output_dir) -> None:
    classification = classify_output_dir(make_output_dir(["bundle.tar", "readme.md"]))

    assert classification.is_multi
    assert classification.file_count == 2


def test_classification_is_count_only(make_output_dir) -> None:
    # A stray log next to the real result still makes the job multi-output.
    classification = classify_output_dir(make_output_dir(["result.pdf", "converter.log"]))

    assert classification.is_multi


def test_custom_manifest_name_is_excluded(make_output_dir) -> None:
    config = PackagingConfig(manifest_file="meta.json")

    files = list_eligible_files(make_output_dir(["a.png", "meta.json", "manifest.json"]), config)

    assert [path.name for path in files] == ["a.png", "manifest.json"]
