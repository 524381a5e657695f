"""Utility helpers for the ContentNow backend.

Submodules:
- datetimes: UTC coercion for stored timestamps (datetimes and JSONB ISO strings)
- content_expiry_scheduler: the recurring driver for the content expiry engine
"""

__all__: list[str] = []
