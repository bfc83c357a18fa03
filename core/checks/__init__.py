"""Verification checks run against applied state."""

from .attachment import AttachmentChecks, Check, CheckFailure, compose
from .diff import AttachmentDiff, ExpectedPrincipals

__all__ = ["AttachmentChecks", "AttachmentDiff", "Check", "CheckFailure", "ExpectedPrincipals", "compose"]
