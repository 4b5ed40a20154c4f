"""Data models persisted in the object store."""

from mygit.models.commit import Commit, rfc3339_now

__all__ = ["Commit", "rfc3339_now"]
