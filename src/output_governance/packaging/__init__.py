"""Multi-output classification, canonical structure building, and archive packaging."""

from output_governance.packaging.archive import (
    archive_filename,
    create_job_archive,
    create_plain_archive,
    governed_package_filename,
    validate_archive_format,
)
from output_governance.packaging.artifacts import collect_output_artifacts, natural_sort_key, select_preview
from output_governance.packaging.classify import classify_output_dir, list_eligible_files
from output_governance.packaging.manifest import (
    RESERVED_MANIFEST_KEYS,
    Manifest,
    build_manifest,
    read_manifest,
    read_package_manifest,
    write_manifest,
)
from output_governance.packaging.models import (
    TASK_TYPES,
    CanonicalStructure,
    OutputArtifact,
    OutputClassification,
    PackageOptions,
    PackageResult,
    TaskType,
)
from output_governance.packaging.pipeline import auto_package, create_governed_package, discard_staging
from output_governance.packaging.structure import create_canonical_structure

__all__ = [
    "archive_filename",
    "governed_package_filename",
    "validate_archive_format",
    "create_plain_archive",
    "create_job_archive",
    "collect_output_artifacts",
    "natural_sort_key",
    "select_preview",
    "classify_output_dir",
    "list_eligible_files",
    "RESERVED_MANIFEST_KEYS",
    "Manifest",
    "build_manifest",
    "write_manifest",
    "read_manifest",
    "read_package_manifest",
    "TASK_TYPES",
    "TaskType",
    "OutputArtifact",
    "OutputClassification",
    "PackageOptions",
    "PackageResult",
    "CanonicalStructure",
    "create_canonical_structure",
    "create_governed_package",
    "auto_package",
    "discard_staging",
]
