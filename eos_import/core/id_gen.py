"""UUID v7 generator for time-sortable, globally unique IDs."""

from uuid_extensions import uuid7


def generate_id() -> str:
    """Generate a canonical hyphenated UUID v7 string for a new record.

    Returns:
        String like "01926f4e-8b7d-7a8e-9c0d-1e2f3a4b5c6d" (fits a Postgres uuid column)
    """
    return str(uuid7())


def generate_token(prefix: str = "") -> str:
    """Generate a compact UUID v7 hex token with optional prefix.

    Args:
        prefix: e.g. "csvFile-"

    Returns:
        String like "csvFile-01926f4e8b7d7a8e9c0d1e2f3a4b5c6d" (no hyphens)
    """
    uid = uuid7().hex
    return f"{prefix}{uid}" if prefix else uid
