"""Terraform state loading."""

from .reader import StateFormatError, StateReader, load_state

__all__ = ["StateFormatError", "StateReader", "load_state"]
