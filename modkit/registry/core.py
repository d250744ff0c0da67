"""
Package registry: the set of packages loaded in one import session.
"""

import logging
from typing import Dict, Iterator, List, Optional

from .errors import DuplicateNameError, ErrorSpan
from .package import Package

logger = logging.getLogger("modkit.registry")


class PackageView:
    """
    Lazy, restartable view over registered packages in registration order.

    Each iteration walks the registry afresh.
    """

    def __init__(self, packages: Dict[str, Package]):
        self._packages = packages

    def __iter__(self) -> Iterator[Package]:
        return iter(list(self._packages.values()))

    def __len__(self) -> int:
        return len(self._packages)

    def __repr__(self) -> str:
        return f"PackageView({len(self)} packages)"


class PackageRegistry:
    """
    Session-scoped package registry.

    Mutated only by the importer and resolver. `processing_order` is `None`
    until the resolver computes it and is reset whenever the package set
    changes.
    """

    def __init__(self):
        self._packages: Dict[str, Package] = {}
        self.processing_order: Optional[List[Package]] = None

    def register(self, package: Package) -> None:
        """
        Register a package.

        Raises:
            DuplicateNameError: If a package with the same name is registered
        """
        existing = self._packages.get(package.name)
        if existing is not None:
            raise DuplicateNameError(
                package_name=package.name,
                sources=[existing.source, package.source],
                span=ErrorSpan(file=package.source),
            )
        self._packages[package.name] = package
        self.processing_order = None
        logger.debug("Registered package `%s` v%s", package.name, package.version)

    def get(self, name: str) -> Optional[Package]:
        return self._packages.get(name)

    def all(self) -> PackageView:
        """Packages in registration order."""
        return PackageView(self._packages)

    def valid(self) -> List[Package]:
        return [p for p in self._packages.values() if p.valid]

    def invalid(self) -> List[Package]:
        return [p for p in self._packages.values() if not p.valid]

    def unload_all(self) -> None:
        """Dispose every package and clear the registry. Idempotent."""
        count = len(self._packages)
        for package in self._packages.values():
            package.dispose()
        self._packages.clear()
        self.processing_order = None
        if count:
            logger.info("Unloaded %d packages.", count)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __repr__(self) -> str:
        return f"PackageRegistry({len(self._packages)} packages)"
