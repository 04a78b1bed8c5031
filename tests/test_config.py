from pathlib import Path

import pytest

from output_governance.config import GovernanceConfig, PackagingConfig, load_settings, resolve_settings_file


def test_load_settings_reads_yaml_and_resolves_paths(tmp_path: Path) -> None:
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    settings_file = config_dir / "settings.yaml"
    settings_file.write_text(
        "paths:\n"
        "  logs_root: ./var/logs\n"
        "packaging:\n"
        "  artifacts_dir: files\n"
        "governance:\n"
        "  sequence_digits: 5\n",
        encoding="utf-8",
    )

    settings = load_settings(config_file=settings_file)

    assert settings.paths.logs_root == (tmp_path / "var" / "logs").resolve()
    assert settings.packaging.artifacts_dir == "files"
    assert settings.packaging.governed_extension == ".tra"
    assert settings.governance.sequence_digits == 5


def test_env_overrides_yaml(settings_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OUTPUT_GOVERNANCE_PACKAGING__MANIFEST_FILE", "meta.json")

    settings = load_settings(config_file=settings_file)

    assert settings.packaging.manifest_file == "meta.json"


def test_settings_file_env_var(settings_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OUTPUT_GOVERNANCE_SETTINGS_FILE", str(settings_file))

    assert resolve_settings_file() == settings_file


def test_missing_settings_file_falls_back_to_defaults(tmp_path: Path) -> None:
    settings = load_settings(config_file=tmp_path / "configs" / "absent.yaml")

    assert settings.packaging == PackagingConfig()
    assert settings.governance == GovernanceConfig()


def test_replacement_for_deprecated_formats() -> None:
    config = GovernanceConfig()

    replacement = config.replacement_for(" YUVJ420P ")

    assert replacement is not None
    assert replacement.pix_fmt == "yuv420p"
    assert replacement.color_range == "pc"
    assert config.replacement_for("yuv420p") is None
