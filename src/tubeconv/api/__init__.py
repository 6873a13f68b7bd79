"""HTTP plumbing shared by feature routers."""

from .errors import ApiError

__all__ = ["ApiError"]
