"""Archive-format contract and uncompressed tar serialization.

Exactly one plain extension (`.tar`) is allowed for directory bundles and one
distinct extension (`.tra`) is reserved for governed packages. Compressed or
zip-style suffixes are stripped and replaced, never honoured.
"""

from __future__ import annotations

import logging
import os
import re
import tarfile
from pathlib import Path
from typing import Callable, Sequence

from output_governance.config import DEFAULT_PACKAGING, PackagingConfig
from output_governance.errors import ArchiveFormatError, SerializeError
from output_governance.utils.paths import atomic_temp_path

LOGGER = logging.getLogger(__name__)

ArchiveFilter = Callable[[str], bool]

_UNSAFE_NAME_CHARS = re.compile(r"[^0-9A-Za-z._-]+")


def _strip_forbidden_suffix(name: str, packaging: PackagingConfig) -> str:
    lower_name = name.lower()
    for forbidden in packaging.forbidden_extensions:
        if lower_name.endswith(forbidden.lower()):
            return name[: -len(forbidden)]
    return name


def archive_filename(base_name: str, packaging: PackagingConfig | None = None) -> str:
    """Return `base_name` rewritten to end in the plain archive extension.

    A forbidden suffix (`.tar.gz`, `.tgz`, `.zip`, `.gz`) is removed first.
    Idempotent: feeding the result back returns it unchanged.
    """

    cfg = packaging or DEFAULT_PACKAGING
    if not base_name.strip():
        raise ArchiveFormatError("archive name must not be blank")
    clean_name = _strip_forbidden_suffix(base_name, cfg)
    if clean_name.lower().endswith(cfg.plain_extension.lower()):
        return clean_name
    return f"{clean_name}{cfg.plain_extension}"


def governed_package_filename(base_name: str, packaging: PackagingConfig | None = None) -> str:
    """Return `base_name` rewritten to end in the governed package extension."""

    cfg = packaging or DEFAULT_PACKAGING
    if not base_name.strip():
        raise ArchiveFormatError("package name must not be blank")
    clean_name = _strip_forbidden_suffix(base_name, cfg)
    if clean_name.lower().endswith(cfg.governed_extension.lower()):
        return clean_name
    return f"{clean_name}{cfg.governed_extension}"


def validate_archive_format(file_name: str, packaging: PackagingConfig | None = None) -> bool:
    """Return True when the name uses the plain archive extension and no forbidden one."""

    cfg = packaging or DEFAULT_PACKAGING
    lower_name = file_name.lower()
    if any(lower_name.endswith(forbidden.lower()) for forbidden in cfg.forbidden_extensions):
        return False
    return lower_name.endswith(cfg.plain_extension.lower())


def safe_job_component(job_id: str) -> str:
    """Make a job id usable as a single path component."""

    cleaned = _UNSAFE_NAME_CHARS.sub("_", job_id).strip("._")
    return cleaned or "job"


def default_archive_filter(packaging: PackagingConfig | None = None) -> ArchiveFilter:
    """Return a filter excluding anything that is already a plain or governed archive."""

    cfg = packaging or DEFAULT_PACKAGING
    excluded = (cfg.plain_extension.lower(), cfg.governed_extension.lower())

    def _keep(relative_path: str) -> bool:
        return not relative_path.lower().endswith(excluded)

    return _keep


def write_tar(
    root: Path,
    members: Sequence[str],
    output_path: Path,
    keep: ArchiveFilter | None = None,
) -> Path:
    """Write `members` of `root` into an uncompressed tar at `output_path`, atomically.

    The archive is built under a hidden temp name beside the target and renamed
    into place, so a failed write never leaves a partial archive at `output_path`.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = atomic_temp_path(output_path)

    def _member_filter(info: tarfile.TarInfo) -> tarfile.TarInfo | None:
        if keep is not None and not keep(info.name):
            return None
        return info

    try:
        with tarfile.open(temp_path, mode="w") as archive:
            for member in members:
                archive.add(root / member, arcname=member, recursive=True, filter=_member_filter)
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path


def create_plain_archive(
    source_dir: Path,
    output_path: Path,
    filter: ArchiveFilter | None = None,
    *,
    packaging: PackagingConfig | None = None,
    logger: logging.Logger | None = None,
) -> Path:
    """Bundle a flat directory into a `.tar`, skipping nested archives by default."""

    effective_logger = logger or LOGGER
    cfg = packaging or DEFAULT_PACKAGING
    source = Path(source_dir)
    final_path = Path(archive_filename(str(output_path), cfg))
    keep = filter or default_archive_filter(cfg)

    if not source.is_dir():
        raise SerializeError("source directory does not exist", path=source)

    try:
        members = [name for name in sorted(os.listdir(source)) if keep(name)]
        write_tar(source, members, final_path, keep=keep)
    except (OSError, tarfile.TarError) as exc:
        raise SerializeError(f"cannot write plain archive: {exc}", path=final_path) from exc

    effective_logger.info("archive.plain_created path=%s members=%s", final_path, len(members))
    return final_path


def create_job_archive(
    output_dir: Path,
    job_id: str,
    *,
    packaging: PackagingConfig | None = None,
    logger: logging.Logger | None = None,
) -> Path:
    """Bundle a job's output directory into `converted_files_<job_id>.tar` inside it.

    Superseded by governed packages for multi-output jobs; kept for converters
    whose consumers expect a raw bundle.
    """

    cfg = packaging or DEFAULT_PACKAGING
    archive_name = f"{cfg.job_archive_prefix}{safe_job_component(job_id)}{cfg.plain_extension}"
    return create_plain_archive(
        Path(output_dir),
        Path(output_dir) / archive_name,
        default_archive_filter(cfg),
        packaging=cfg,
        logger=logger,
    )
