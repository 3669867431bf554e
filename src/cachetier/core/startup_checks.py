"""Startup validation: fail-fast on configurations where no tier can ever work."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cachetier.core.config import AppSettings

log = logging.getLogger(__name__)

# S3 naming rules: 3-63 chars, lowercase letters, digits, dots and hyphens
_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")


def validate_settings(settings: AppSettings) -> None:
    """Validate settings before the first cache call. Raises ValueError on fatal misconfig."""
    _check_any_tier(settings)
    _check_bucket_name(settings)


def _check_any_tier(settings: AppSettings) -> None:
    """Reject a setup where both tiers are switched off."""
    if not settings.remote.is_configured and settings.local.backend == "disabled":
        raise ValueError(
            "No cache tier is configured: CACHETIER_REMOTE_BUCKET is empty and "
            "CACHETIER_LOCAL_BACKEND=disabled. Set a bucket or enable the local backend."
        )


def _check_bucket_name(settings: AppSettings) -> None:
    """Warn about bucket names S3 will refuse; the remote tier will then fall back."""
    bucket = settings.remote.bucket
    if bucket and not _BUCKET_NAME_RE.match(bucket):
        log.warning(
            "CACHETIER_REMOTE_BUCKET=%r is not a valid S3 bucket name. "
            "Remote cache calls will fail and fall back to the local cache.",
            bucket,
        )
