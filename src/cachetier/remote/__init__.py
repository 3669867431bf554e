"""Remote object-store tier: S3 client and key resolution."""

from __future__ import annotations

from cachetier.remote.client import S3RemoteClient
from cachetier.remote.resolver import KeyResolver, remote_object_path

__all__ = ["S3RemoteClient", "KeyResolver", "remote_object_path"]
