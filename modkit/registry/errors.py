"""
Registry error types with rich diagnostics.
"""

from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass
class ErrorSpan:
    """File location for error context."""

    file: str
    line: Optional[int] = None
    column: Optional[int] = None
    snippet: Optional[str] = None

    def __str__(self) -> str:
        parts = [self.file]
        if self.line is not None:
            parts.append(f":{self.line}")
            if self.column is not None:
                parts.append(f":{self.column}")
        return "".join(parts)


class RegistryError(Exception):
    """Base error for all modkit registry and import errors."""

    def __init__(
        self,
        message: str,
        *,
        span: Optional[ErrorSpan] = None,
        suggestion: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.span = span
        self.suggestion = suggestion
        self.details = details or {}

    def format_error(self) -> str:
        """Format error with rich diagnostics."""
        lines = []

        lines.append(f"❌ {self.__class__.__name__}: {self.message}")

        if self.span:
            lines.append(f"   at {self.span}")
            if self.span.snippet:
                lines.append(f"\n   {self.span.snippet}")

        if self.details:
            lines.append("\n   Details:")
            for key, value in self.details.items():
                lines.append(f"   - {key}: {value}")

        if self.suggestion:
            lines.append(f"\n   💡 Suggestion: {self.suggestion}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format_error()


class InvalidNameError(RegistryError, ValueError):
    """
    Package or dependency name rejected by the name validator.

    Example:
        mods/../escape  <- contains a path separator
    """

    def __init__(self, name: Any, *, span: Optional[ErrorSpan] = None):
        self.name = name
        super().__init__(
            f"Invalid package name: {name!r}",
            span=span,
            suggestion=(
                "Package names may only contain letters, digits, '_', '-' "
                "and '.', must not start with '.', and are at most 64 characters."
            ),
            details={"name": name},
        )


class InvalidVersionError(RegistryError, ValueError):
    """Version or version constraint string could not be parsed."""

    def __init__(
        self,
        value: Any,
        *,
        span: Optional[ErrorSpan] = None,
        suggestion: Optional[str] = None,
    ):
        self.value = value
        super().__init__(
            f"Invalid version: {value!r}",
            span=span,
            suggestion=suggestion or "Use MAJOR.MINOR.PATCH, optionally prefixed by '>=', '==' or '^'.",
            details={"version": value},
        )


class ManifestValidationError(RegistryError):
    """
    Package manifest is missing or structurally invalid.

    Collects every problem found in one manifest.
    """

    def __init__(
        self,
        package_name: str,
        validation_errors: List[str],
        *,
        span: Optional[ErrorSpan] = None,
    ):
        self.package_name = package_name
        self.validation_errors = validation_errors

        error_list = "\n".join(f"   - {e}" for e in validation_errors)

        message = (
            f"Manifest of '{package_name}' validation failed:\n"
            f"{error_list}"
        )

        super().__init__(
            message,
            span=span,
            suggestion=(
                "Ensure the manifest has a version and that dependencies and "
                "assets are lists or mappings of strings."
            ),
            details={
                "package": package_name,
                "error_count": len(validation_errors),
            },
        )


class DuplicateNameError(RegistryError):
    """
    Two packages declare the same name within one session.

    Only the second registration fails.
    """

    def __init__(
        self,
        package_name: str,
        sources: List[str],
        *,
        span: Optional[ErrorSpan] = None,
    ):
        self.package_name = package_name
        self.sources = sources

        source_list = "\n".join(f"   - {s}" for s in sources)

        super().__init__(
            f"Duplicate package name '{package_name}' declared in:\n{source_list}",
            span=span,
            suggestion="Each package must have a unique name. Rename or remove one of them.",
            details={"package": package_name, "source_count": len(sources)},
        )


class UnresolvedDependencyError(RegistryError):
    """
    A declared dependency is missing, has an unsatisfied version, or is
    itself invalid.

    The owning package is marked invalid but stays loaded.
    """

    def __init__(
        self,
        package_name: str,
        dependency: Any,
        reason: str,
        *,
        installed_version: Optional[str] = None,
        span: Optional[ErrorSpan] = None,
    ):
        self.package_name = package_name
        self.dependency = dependency
        self.reason = reason
        self.installed_version = installed_version

        details = {
            "package": package_name,
            "dependency": str(dependency),
            "reason": reason,
        }
        if installed_version is not None:
            details["installed"] = installed_version

        super().__init__(
            f"Package '{package_name}' has unresolved dependency "
            f"'{dependency}': {reason}",
            span=span,
            suggestion=(
                f"Install a version of '{dependency.name}' that satisfies "
                f"'{dependency.version_constraint}', or remove the dependency."
            ) if hasattr(dependency, "version_constraint") else None,
            details=details,
        )


class CyclicDependencyError(RegistryError):
    """
    Package is part of a dependency cycle.

    Example:
        a depends on b
        b depends on a  <- CYCLE
    """

    def __init__(
        self,
        package_name: str,
        cycle: List[str],
        *,
        span: Optional[ErrorSpan] = None,
    ):
        self.package_name = package_name
        self.cycle = cycle
        cycle_repr = " → ".join(cycle) + f" → {cycle[0]}"

        super().__init__(
            f"Circular dependency detected: {cycle_repr}",
            span=span,
            suggestion="Break the cycle by removing one of the dependencies.",
            details={"cycle": cycle, "cycle_length": len(cycle)},
        )


class NoActiveAssetError(RegistryError):
    """A property command appeared before any asset was started."""

    def __init__(self, command: str, *, span: Optional[ErrorSpan] = None):
        self.command = command
        line = f" at line {span.line}" if span and span.line is not None else ""
        super().__init__(
            f"No material defined for `{command}`{line}",
            span=span,
            suggestion="Start a material with `newmtl <name>` before setting properties.",
            details={"command": command},
        )


class FormatError(RegistryError):
    """Malformed numeric or argument data in a line-oriented asset file."""

    def __init__(
        self,
        message: str,
        *,
        line: int,
        span: Optional[ErrorSpan] = None,
    ):
        self.line = line
        super().__init__(
            f"{message} (line {line})",
            span=span,
            details={"line": line},
        )


class AssetIOError(RegistryError):
    """Asset source file could not be read."""

    def __init__(self, path: str, reason: str, *, span: Optional[ErrorSpan] = None):
        self.path = path
        self.reason = reason
        super().__init__(
            f"Failed to read asset file `{path}`: {reason}",
            span=span or ErrorSpan(file=path),
            details={"file": path, "reason": reason},
        )


class DuplicateGuidError(RegistryError):
    """
    Two assets share a GUID within one import session.

    This is a logic error, not a user input error.
    """

    def __init__(self, guid: int, existing: str, incoming: str):
        self.guid = guid
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"Duplicate asset GUID {guid:016x}: `{incoming}` collides with `{existing}`",
            details={"guid": f"{guid:016x}", "existing": existing, "incoming": incoming},
        )


@dataclass
class ValidationReport:
    """
    Aggregated validation report.

    Collects every error found during a pass before anything is decided.
    """

    errors: List[RegistryError] = field(default_factory=list)

    def add_error(self, error: RegistryError) -> None:
        """Add error to report."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Check if report has errors."""
        return len(self.errors) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize report."""
        return {
            "error_count": len(self.errors),
            "errors": [
                {
                    "type": e.__class__.__name__,
                    "message": e.message,
                    "details": e.details,
                }
                for e in self.errors
            ],
        }

    def format_report(self) -> str:
        """Format report for display."""
        if not self.errors:
            return "✅ No errors"

        lines = [f"❌ {len(self.errors)} error(s):"]
        for i, error in enumerate(self.errors, 1):
            lines.append(f"\n{i}. {error.format_error()}")
        return "\n".join(lines)
