"""Login restriction policy."""

from .restrictions import AccessPolicy, is_unrecognized_address

__all__ = ["AccessPolicy", "is_unrecognized_address"]
