"""
Package importer: discovery, construction, dependency resolution and asset
import, with failures isolated to one package or one file.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .assets.loaders import EXTENSION_PRIORITY, import_file
from .assets.registry import AssetRegistry
from .config import ModkitConfig
from .registry.core import PackageRegistry
from .registry.errors import (
    DuplicateGuidError,
    DuplicateNameError,
    RegistryError,
    ValidationReport,
)
from .registry.manifest import ManifestLoader
from .registry.package import Package, require_name
from .registry.resolver import DependencyResolver

logger = logging.getLogger("modkit.importer")


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


@dataclass
class ImportReport:
    """Totals and per-package outcome of one import pass."""

    discovered: int = 0
    constructed: int = 0
    imported: int = 0
    failed: Dict[str, RegistryError] = field(default_factory=dict)
    invalid: Dict[str, List[str]] = field(default_factory=dict)
    failed_files: Dict[str, RegistryError] = field(default_factory=dict)
    processing_order: List[str] = field(default_factory=list)
    packages: Dict[str, Dict[str, int]] = field(default_factory=dict)
    validation: ValidationReport = field(default_factory=ValidationReport)

    @property
    def asset_count(self) -> int:
        return sum(p["asset_count"] for p in self.packages.values())

    @property
    def ok(self) -> bool:
        return not (self.failed or self.invalid or self.failed_files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "discovered": self.discovered,
            "constructed": self.constructed,
            "imported": self.imported,
            "asset_count": self.asset_count,
            "processing_order": list(self.processing_order),
            "failed": {name: e.message for name, e in self.failed.items()},
            "invalid": {name: list(reasons) for name, reasons in self.invalid.items()},
            "failed_files": {path: e.message for path, e in self.failed_files.items()},
            "packages": {name: dict(counts) for name, counts in self.packages.items()},
            "validation": self.validation.to_dict(),
        }


class PackageImporter:
    """
    Imports every package under one packages directory.

    The package and asset registries are session state owned by the
    importer; both are rebuilt by `reimport_all()`.
    """

    def __init__(
        self,
        config: Optional[Union[ModkitConfig, str, Path]] = None,
        *,
        packages: Optional[PackageRegistry] = None,
        assets: Optional[AssetRegistry] = None,
        loader: Optional[ManifestLoader] = None,
    ):
        if config is None:
            config = ModkitConfig()
        elif not isinstance(config, ModkitConfig):
            config = ModkitConfig(packages_dir=str(config))
        self.config = config
        self.root = config.packages_path
        self.packages = packages if packages is not None else PackageRegistry()
        self.assets = assets if assets is not None else AssetRegistry(strict=config.strict)
        self.loader = loader or ManifestLoader(
            manifest_names=config.manifest_names,
            asset_priorities=EXTENSION_PRIORITY,
        )
        self.resolver = DependencyResolver(self.packages)
        self.last_report: Optional[ImportReport] = None

    def package_path(self, name: str) -> Path:
        """Directory of the package called `name`."""
        return self.root / require_name(name)

    def discover(self) -> List[Path]:
        """Immediate, non-hidden subdirectories of the packages root, by name."""
        if not self.root.is_dir():
            logger.warning("Packages directory `%s` does not exist.", self.root)
            return []
        return sorted(
            (
                path for path in self.root.iterdir()
                if path.is_dir() and not path.name.startswith((".", "_"))
            ),
            key=lambda p: p.name,
        )

    def import_all(self) -> ImportReport:
        """
        Run a full import pass into the current session.

        Expects an empty session; use `reimport_all()` to replace a previous
        import.
        """
        with self.assets.lock:
            report = ImportReport()
            self.last_report = report

            directories = self.discover()
            report.discovered = len(directories)
            if not directories:
                return report
            logger.info("%s identified.", _plural(len(directories), "package", "packages"))

            for directory, package in zip(directories, self._construct(directories, report)):
                if package is None:
                    continue
                try:
                    self.packages.register(package)
                except DuplicateNameError as exc:
                    logger.error("Failed to import package `%s`: %s", directory.name, exc.message)
                    report.failed[directory.name] = exc
                    continue
                report.constructed += 1
                logger.info(
                    "Imported package `%s` with %s and %s.",
                    package.name,
                    _plural(package.dependency_count, "dependency", "dependencies"),
                    _plural(len(package.asset_files), "asset", "assets"),
                )
            report.failed = dict(sorted(report.failed.items()))
            logger.info("Imported %s.", _plural(report.constructed, "package", "packages"))

            report.validation = self.resolver.validate()
            order = self.resolver.compute_order(report.validation)
            if report.validation.has_errors():
                logger.debug("Dependency resolution:\n%s", report.validation.format_report())
            report.processing_order = [p.name for p in order]

            for package in order:
                self._import_assets(package, report)
                report.imported += 1

            for package in self.packages.all():
                report.packages[package.name] = {
                    "dependency_count": package.dependency_count,
                    "asset_count": package.asset_count,
                }
                if not package.valid:
                    report.invalid[package.name] = [p.message for p in package.problems]

            logger.info(
                "Loaded %s from %s.",
                _plural(report.asset_count, "asset", "assets"),
                _plural(report.imported, "package", "packages"),
            )
            return report

    def reimport_all(self) -> ImportReport:
        """
        Unload everything and import again.

        Holds the asset registry lock throughout, so readers see either the
        previous asset set or the new one.
        """
        with self.assets.lock:
            self.packages.unload_all()
            self.assets.clear()
            return self.import_all()

    def import_package(self, name: str) -> Optional[Package]:
        """
        Build and register the package called `name`.

        Returns:
            The package, or None if it could not be constructed or registered

        Raises:
            InvalidNameError: If `name` is not a valid package name
        """
        directory = self.package_path(name)
        package = self._build(directory, None)
        if package is None:
            return None
        try:
            self.packages.register(package)
        except DuplicateNameError as exc:
            logger.error("Failed to import package `%s`: %s", name, exc.message)
            return None
        return package

    def _construct(self, directories: List[Path], report: ImportReport) -> List[Optional[Package]]:
        if self.config.workers > 1 and len(directories) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                return list(pool.map(lambda d: self._build(d, report), directories))
        return [self._build(d, report) for d in directories]

    def _build(self, directory: Path, report: Optional[ImportReport]) -> Optional[Package]:
        try:
            return self.loader.load(directory)
        except RegistryError as exc:
            logger.error("Failed to import package `%s`: %s", directory.name, exc.message)
            if report is not None:
                report.failed[directory.name] = exc
            return None

    def _import_assets(self, package: Package, report: ImportReport) -> None:
        for relative in package.asset_files:
            try:
                assets = import_file(package, relative, self.assets)
            except DuplicateGuidError:
                raise
            except RegistryError as exc:
                path = f"{package.name}/{relative}"
                logger.error("Failed to import asset `%s`: %s", path, exc.message)
                report.failed_files[path] = exc
                continue
            logger.debug("Imported `%s/%s` (%d assets)", package.name, relative, len(assets))
