"""
Adapters - External collaborators of the search domain.

The search transport and the domain object layer are wrapped here to isolate
the translation and hydration engine from concrete backends.
"""

from .models import Resource, ResourceAdapter
from .sqlite import SQLiteConnection, SQLiteIndex, connect

__all__ = [
    # Domain objects
    "Resource",
    "ResourceAdapter",
    # Reference transport
    "SQLiteConnection",
    "SQLiteIndex",
    "connect",
]
