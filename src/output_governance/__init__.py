"""Output governance and packaging for multi-tool conversion jobs."""

from output_governance.governance import fix_args, validate_and_fix_args, validate_args
from output_governance.packaging import (
    Manifest,
    PackageOptions,
    PackageResult,
    archive_filename,
    auto_package,
    classify_output_dir,
    create_governed_package,
)

__all__ = [
    "__version__",
    "validate_args",
    "fix_args",
    "validate_and_fix_args",
    "archive_filename",
    "classify_output_dir",
    "create_governed_package",
    "auto_package",
    "Manifest",
    "PackageOptions",
    "PackageResult",
]

__version__ = "0.1.0"
