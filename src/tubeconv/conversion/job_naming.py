"""Job identifiers shared by log lines and artifact filenames."""

import uuid


def new_job_id() -> str:
    """Return a random 128-bit identifier as 32 lowercase hex characters."""
    return uuid.uuid4().hex
