# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Database backends for the source digest."""

from srcdigest.database.sqlite import SQLiteSummaryCache

__all__ = ["SQLiteSummaryCache"]
