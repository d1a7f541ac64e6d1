"""Export utilities: the security activity log."""

from .activity import list_activity, log_activity

__all__ = ["list_activity", "log_activity"]
