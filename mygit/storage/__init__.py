"""On-disk storage: content-addressed objects, references, and the index."""

from mygit.storage.index import Index
from mygit.storage.objects import ObjectStore
from mygit.storage.refs import RefStore

__all__ = ["Index", "ObjectStore", "RefStore"]
