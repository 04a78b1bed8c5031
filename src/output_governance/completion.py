"""Turn a finished conversion job into exactly one deliverable."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Mapping, Protocol

from output_governance.config import DEFAULT_PACKAGING, PackagingConfig
from output_governance.errors import PackagingError, PackagingStage
from output_governance.packaging.classify import list_eligible_files
from output_governance.packaging.manifest import Manifest
from output_governance.packaging.models import PackageOptions, TaskType
from output_governance.packaging.pipeline import auto_package

LOGGER = logging.getLogger(__name__)

JobStatus = Literal["delivered", "packaged", "failed"]
FailureClass = Literal["conversion", "packaging"]


class JobContext(Protocol):
    """What the job runner knows about a finished conversion."""

    @property
    def job_id(self) -> str: ...

    @property
    def engine(self) -> str: ...

    @property
    def source_format(self) -> str: ...

    @property
    def output_format(self) -> str: ...

    @property
    def output_dir(self) -> Path: ...


@dataclass(frozen=True, slots=True)
class JobOutcome:
    """Delivery result of one job as reported to operators and callers."""

    job_id: str
    status: JobStatus
    deliverable: Path | None = None
    manifest: Manifest | None = None
    staging_dir: Path | None = None
    failure_class: FailureClass | None = None
    failed_stage: PackagingStage | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status != "failed"

    @classmethod
    def conversion_failed(cls, job_id: str, error: str) -> "JobOutcome":
        """Outcome for a job whose converter itself failed or produced nothing."""

        return cls(job_id=job_id, status="failed", failure_class="conversion", error=error)

    @classmethod
    def packaging_failed(cls, job_id: str, exc: PackagingError) -> "JobOutcome":
        """Outcome for a job whose output exists but could not be delivered."""

        return cls(
            job_id=job_id,
            status="failed",
            failure_class="packaging",
            failed_stage=exc.stage,
            error=str(exc),
        )


def complete_job(
    context: JobContext,
    *,
    metadata: Mapping[str, Any] | None = None,
    task_type: TaskType = "multi-output",
    packaging: PackagingConfig | None = None,
    logger: logging.Logger | None = None,
) -> JobOutcome:
    """Deliver a finished job: the sole output file, or a governed package of many."""

    effective_logger = logger or LOGGER
    cfg = packaging or DEFAULT_PACKAGING
    options = PackageOptions(
        job_id=context.job_id,
        engine=context.engine,
        source_format=context.source_format,
        output_format=context.output_format,
        metadata=metadata,
        task_type=task_type,
    )

    try:
        result = auto_package(Path(context.output_dir), options, packaging=cfg, logger=effective_logger)
    except PackagingError as exc:
        effective_logger.error("complete_job.packaging_failed job_id=%s stage=%s error=%s", context.job_id, exc.stage, exc)
        return JobOutcome.packaging_failed(context.job_id, exc)

    if result is not None:
        return JobOutcome(
            job_id=context.job_id,
            status="packaged",
            deliverable=result.package_path,
            manifest=result.manifest,
            staging_dir=result.staging_dir,
        )

    files = list_eligible_files(Path(context.output_dir), cfg, logger=effective_logger)
    if not files:
        effective_logger.warning("complete_job.no_output job_id=%s output_dir=%s", context.job_id, context.output_dir)
        return JobOutcome.conversion_failed(context.job_id, "converter produced no output files")

    return JobOutcome(job_id=context.job_id, status="delivered", deliverable=files[0])
