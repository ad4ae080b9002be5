"""
Models Adapter - Pydantic domain objects for the search bridge.
"""

from .resource import FieldProperty, PersistenceState, Resource, ResourceAdapter

__all__ = ["FieldProperty", "PersistenceState", "Resource", "ResourceAdapter"]
