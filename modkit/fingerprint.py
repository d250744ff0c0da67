"""
Fingerprint generator for import sessions.

Generates deterministic SHA-256 fingerprints from registry state, so two
imports of the same package tree can be compared.
"""

import hashlib
import json
from typing import Any, Dict, List

from .assets.registry import AssetRegistry
from .registry.core import PackageRegistry
from .registry.package import Package


class FingerprintGenerator:
    """
    Generates deterministic fingerprints for an import session.

    Fingerprint includes:
    - Processing order
    - Packages (names, versions, dependencies, validity)
    - Asset keys and types

    Excludes:
    - Absolute filesystem paths
    - Asset payloads
    """

    def generate(self, packages: PackageRegistry, assets: AssetRegistry) -> str:
        """
        Generate fingerprint from session state.

        Returns:
            SHA-256 hex digest string
        """
        canonical = self.canonical(packages, assets)
        json_str = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(json_str.encode("utf-8")).hexdigest()

    def canonical(self, packages: PackageRegistry, assets: AssetRegistry) -> Dict[str, Any]:
        """Canonical dict representation of session state."""
        order = packages.processing_order or []
        return {
            "version": "1.0",
            "processing_order": [p.name for p in order],
            "packages": [
                self._canonicalize_package(p)
                for p in sorted(packages.all(), key=lambda p: p.name)
            ],
            "assets": self._canonicalize_assets(assets),
        }

    def _canonicalize_package(self, package: Package) -> Dict[str, Any]:
        return {
            "name": package.name,
            "version": str(package.version),
            "dependencies": [str(d) for d in package.dependencies],
            "valid": package.valid,
            "problems": sorted(p.__class__.__name__ for p in package.problems),
            "asset_files": list(package.asset_files),
        }

    def _canonicalize_assets(self, assets: AssetRegistry) -> List[Dict[str, Any]]:
        return sorted(
            (
                {"guid": f"{a.guid:016x}", "type": a.type.value, "path": a.path}
                for a in assets
            ),
            key=lambda a: (a["path"], a["guid"]),
        )
