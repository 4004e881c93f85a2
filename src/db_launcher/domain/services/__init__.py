"""Domain services for name resolution and artifact cleanup."""

from db_launcher.domain.services.artifact_cleaner import (
    ARTIFACT_SUFFIXES,
    CleanupReport,
    delete_matching,
    schedule_artifact_deletion,
    schedule_deletion,
)
from db_launcher.domain.services.path_name_resolver import resolve, storage_prefix

__all__ = [
    "ARTIFACT_SUFFIXES",
    "CleanupReport",
    "delete_matching",
    "schedule_artifact_deletion",
    "schedule_deletion",
    "resolve",
    "storage_prefix",
]
