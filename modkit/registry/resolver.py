"""
Dependency resolver: validates declared dependencies and computes the
package processing order.
"""

import logging
from collections import defaultdict, deque
from typing import Dict, List, Optional

from .core import PackageRegistry
from .errors import (
    CyclicDependencyError,
    ErrorSpan,
    UnresolvedDependencyError,
    ValidationReport,
)
from .graph import DependencyGraph
from .package import Package

logger = logging.getLogger("modkit.registry.resolver")


class DependencyResolver:
    """
    Validates the dependency graph of a `PackageRegistry` and orders it.

    Failures never abort resolution: offending packages are marked invalid
    and excluded, everything else is still ordered.
    """

    def __init__(self, registry: PackageRegistry):
        self.registry = registry

    def resolve(self) -> List[Package]:
        """Run `validate()` then `compute_order()` into one report."""
        report = self.validate()
        return self.compute_order(report)

    def validate(self) -> ValidationReport:
        """
        Check every dependency of every package.

        A missing dependency or an unsatisfied version constraint marks the
        owning package invalid and records the descriptor as unresolved.
        The full dependency list of each package is examined.
        """
        report = ValidationReport()

        for package in self.registry.all():
            package.reset_validation()

        for package in self.registry.all():
            for dependency in package.dependencies:
                target = self.registry.get(dependency.name)
                if target is None:
                    error = UnresolvedDependencyError(
                        package.name,
                        dependency,
                        "package not found",
                        span=ErrorSpan(file=package.source),
                    )
                elif not dependency.is_satisfied_by(target.version):
                    error = UnresolvedDependencyError(
                        package.name,
                        dependency,
                        f"installed version {target.version} does not satisfy "
                        f"{dependency.version_constraint}",
                        installed_version=str(target.version),
                        span=ErrorSpan(file=package.source),
                    )
                else:
                    continue

                package.unresolved.append(dependency)
                package.invalidate(error)
                report.add_error(error)
                logger.warning(
                    "Package `%s` has unresolved dependency `%s`: %s",
                    package.name, dependency, error.reason,
                )

        return report

    def compute_order(self, report: Optional[ValidationReport] = None) -> List[Package]:
        """
        Topologically order the valid packages.

        Packages depending on an invalid package are excluded first.
        Remaining packages that Kahn's algorithm cannot order are either on a
        cycle (`CyclicDependencyError`) or depend on one
        (`UnresolvedDependencyError`); both are marked invalid and excluded.
        Each exclusion is added to `report` when one is given.

        Returns:
            Processing order, dependencies before dependents, ties broken by
            ascending package name
        """
        self._exclude_invalid_dependents(report)

        valid: Dict[str, Package] = {p.name: p for p in self.registry.all() if p.valid}

        graph = DependencyGraph()
        for name, package in valid.items():
            graph.add_node(name, [d.name for d in package.dependencies])

        ordered, remaining = graph.topological_sort()

        if remaining:
            for cycle in graph.find_cycles():
                for name in cycle:
                    package = valid[name]
                    error = CyclicDependencyError(
                        name, cycle, span=ErrorSpan(file=package.source),
                    )
                    package.invalidate(error)
                    if report is not None:
                        report.add_error(error)
                    logger.warning(
                        "Package `%s` excluded: circular dependency %s",
                        name, " -> ".join(cycle + [cycle[0]]),
                    )
            self._exclude_invalid_dependents(report)

        order = [valid[name] for name in ordered if name in valid and valid[name].valid]
        for index, package in enumerate(order):
            package.load_order = index

        self.registry.processing_order = order
        logger.debug("Processing order: %s", ", ".join(p.name for p in order))
        return order

    def build_graph(self) -> DependencyGraph:
        """Graph over every registered package, valid or not."""
        graph = DependencyGraph()
        for package in self.registry.all():
            graph.add_node(package.name, [d.name for d in package.dependencies])
        return graph

    def _exclude_invalid_dependents(self, report: Optional[ValidationReport]) -> None:
        """Invalidate every valid package that depends, directly or not, on an invalid one."""
        dependents: Dict[str, List[Package]] = defaultdict(list)
        for package in self.registry.all():
            for dependency in package.dependencies:
                dependents[dependency.name].append(package)

        pending = deque(p for p in self.registry.all() if not p.valid)
        while pending:
            target = pending.popleft()
            for package in dependents.get(target.name, []):
                if not package.valid:
                    continue
                dependency = next(d for d in package.dependencies if d.name == target.name)
                error = UnresolvedDependencyError(
                    package.name,
                    dependency,
                    f"dependency '{target.name}' is invalid",
                    installed_version=str(target.version),
                    span=ErrorSpan(file=package.source),
                )
                package.unresolved.append(dependency)
                package.invalidate(error)
                if report is not None:
                    report.add_error(error)
                logger.warning(
                    "Package `%s` excluded: dependency `%s` is invalid",
                    package.name, target.name,
                )
                pending.append(package)
