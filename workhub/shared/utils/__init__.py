"""Shared utilities: UTC datetimes and ID generation."""

from workhub.shared.utils.datetime import ensure_utc, utc_now
from workhub.shared.utils.generators import generate_cuid

__all__ = ["ensure_utc", "generate_cuid", "utc_now"]
