"""IAM API access."""

from .inspector import IamInspector, PolicyNotFound

__all__ = ["IamInspector", "PolicyNotFound"]
