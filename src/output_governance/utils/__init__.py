"""Shared utility helpers."""

from output_governance.utils.paths import atomic_temp_path, write_json_atomically
from output_governance.utils.time_utils import now_utc, utc_iso_string

__all__ = [
    "atomic_temp_path",
    "write_json_atomically",
    "now_utc",
    "utc_iso_string",
]
