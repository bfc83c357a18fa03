"""Core domain models and services for the IAM policy attachment harness."""

from .models import ManagedPolicy, PolicyDoc, PolicyEntities, PolicyStatement, ResourceInstance, State

__all__ = ["ManagedPolicy", "PolicyDoc", "PolicyEntities", "PolicyStatement", "ResourceInstance", "State"]
