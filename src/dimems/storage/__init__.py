"""File storage: vault layout, the document store and the optional id index."""

from dimems.storage.filesystem import DocumentStore
from dimems.storage.index import PathIndex
from dimems.storage.layout import VaultLayout

__all__ = ["DocumentStore", "PathIndex", "VaultLayout"]
