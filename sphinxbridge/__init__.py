"""
SphinxBridge - Query translation and result hydration for realtime search indexes.

Example:
    >>> from sphinxbridge import Attr, Index
    >>> index = Index(ResourceAdapter(Post), connection, name="posts_rt")
    >>> posts = await index.search("badgers", {Attr("views").gt: 7}, order="id")
"""

from sphinxbridge.domains.search import Attr, Collection, Index

__version__ = "0.1.0"
__all__ = ["__version__", "Attr", "Collection", "Index"]
