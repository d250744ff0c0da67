"""
Asset registry: session-scoped store of imported assets, keyed by GUID and
by logical path.
"""

import logging
import posixpath
import threading
from typing import Dict, Iterator, List, Optional

from ..registry.errors import DuplicateGuidError
from .core import Asset, AssetType

logger = logging.getLogger("modkit.assets.registry")


def normalise_path(path: str) -> str:
    """Canonical logical path: forward slashes, no '.' or '..' segments."""
    path = path.replace("\\", "/")
    normalised = posixpath.normpath(path)
    return "" if normalised == "." else normalised.lstrip("/")


def resolve_relative(base_path: str, reference: str) -> str:
    """Resolve `reference` against the directory of the logical `base_path`."""
    return normalise_path(posixpath.join(posixpath.dirname(base_path), reference.replace("\\", "/")))


class AssetRegistry:
    """
    GUID- and path-keyed asset store.

    Every access takes a re-entrant lock, so an importer holding `lock`
    keeps readers out until it releases it.

    Args:
        strict: Raise `DuplicateGuidError` on a GUID collision. When False the
            colliding asset is rejected and the collision logged.
    """

    def __init__(self, *, strict: bool = True):
        self.strict = strict
        self.lock = threading.RLock()
        self._by_guid: Dict[int, Asset] = {}
        self._by_path: Dict[str, Asset] = {}

    def add(self, asset: Asset) -> bool:
        """
        Insert an asset if its GUID is free.

        Returns:
            True if the asset was added

        Raises:
            DuplicateGuidError: On a GUID collision in strict mode
        """
        with self.lock:
            existing = self._by_guid.get(asset.guid)
            if existing is not None:
                error = DuplicateGuidError(asset.guid, existing.path, asset.path)
                if self.strict:
                    raise error
                logger.error("Rejected asset: %s", error.message)
                return False

            self._by_guid[asset.guid] = asset
            key = normalise_path(asset.path)
            if key in self._by_path:
                logger.warning("Asset path `%s` already registered; keeping the first", key)
            else:
                self._by_path[key] = asset
            logger.debug("Registered %s", asset)
            return True

    def get(self, guid: int) -> Optional[Asset]:
        with self.lock:
            return self._by_guid.get(guid)

    def find(self, path: str, asset_type: Optional[AssetType] = None) -> Optional[Asset]:
        """
        Look up an asset by logical path.

        Absent assets, including ones not imported yet, and assets of another
        type give None.
        """
        with self.lock:
            asset = self._by_path.get(normalise_path(path))
        if asset is None:
            return None
        if asset_type is not None and asset.type is not asset_type:
            return None
        return asset

    def of_type(self, asset_type: AssetType) -> List[Asset]:
        with self.lock:
            return [a for a in self._by_guid.values() if a.type is asset_type]

    def paths(self) -> List[str]:
        with self.lock:
            return sorted(self._by_path)

    def clear(self) -> None:
        with self.lock:
            self._by_guid.clear()
            self._by_path.clear()

    def __contains__(self, key: object) -> bool:
        with self.lock:
            if isinstance(key, int):
                return key in self._by_guid
            if isinstance(key, str):
                return normalise_path(key) in self._by_path
        return False

    def __iter__(self) -> Iterator[Asset]:
        with self.lock:
            return iter(list(self._by_guid.values()))

    def __len__(self) -> int:
        with self.lock:
            return len(self._by_guid)

    def __repr__(self) -> str:
        return f"AssetRegistry({len(self)} assets)"
