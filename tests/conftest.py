"""Shared fixtures for output_governance tests."""

from pathlib import Path
from typing import Callable, Iterable

import pytest

from output_governance.packaging import PackageOptions


@pytest.fixture
def make_output_dir(tmp_path: Path) -> Callable[..., Path]:
    """Create a converter output directory holding the given file names."""

    def _make(names: Iterable[str], name: str = "output") -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for file_name in names:
            target = directory / file_name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(f"content of {file_name}".encode("utf-8"))
        return directory

    return _make


@pytest.fixture
def options() -> PackageOptions:
    return PackageOptions(
        job_id="job-1",
        engine="ffmpeg",
        source_format="mp4",
        output_format="png",
    )


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Write a settings YAML whose logs land inside tmp_path."""

    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    path = config_dir / "settings.yaml"
    path.write_text(
        "paths:\n"
        f"  logs_root: {tmp_path / 'logs'}\n",
        encoding="utf-8",
    )
    return path
