"""Manifest and lock file reader for cargo-ninja.

This module turns a project root into ProjectMetadata:
- Cargo.toml and Cargo.lock are loaded and validated
- Every locked package reachable through normal dependencies is located
  (local path, registry cache, or git checkout under CARGO_HOME)
- Each package's own Cargo.toml is read for its target, edition and
  dependency declarations

The lock file is authoritative. Nothing here resolves version requirements
or fetches sources; a package missing from Cargo.lock or from the cargo
cache is an input error.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from pathlib import Path

import structlog

from cargo_ninja_core.config import LOCK_FILE_NAME, MANIFEST_FILE_NAME, PipelineConfig
from cargo_ninja_core.errors import (
    AmbiguousDependencyError,
    ConfigurationError,
    LockMismatchError,
    UnsupportedError,
)
from cargo_ninja_core.models import ProjectMetadata, RawDependency, RawUnit, UnitKey, UnitKind
from cargo_ninja_core.schemas import (
    KNOWN_EDITIONS,
    CargoLock,
    CargoManifest,
    DependencyReference,
    DependencySpec,
    LockPackage,
    PackageSection,
    TargetSection,
    crate_name,
)

logger = structlog.get_logger(__name__)

REGISTRY_SOURCE_PREFIXES = ("registry+", "sparse+")
GIT_SOURCE_PREFIX = "git+"

# cargo checks out git revisions into directories named after the short id
GIT_SHORT_ID_LENGTH = 7


def find_project_root(start: Path) -> Path:
    """Find the nearest directory at or above ``start`` holding Cargo.toml.

    Args:
        start: Directory to start from.

    Returns:
        The project root.

    Raises:
        ConfigurationError: If no Cargo.toml exists in ``start`` or any parent.
    """
    start = start.resolve()
    for candidate in (start, *start.parents):
        if (candidate / MANIFEST_FILE_NAME).is_file():
            return candidate
    raise ConfigurationError(
        f"could not find {MANIFEST_FILE_NAME} in {start} or any parent directory"
    )


def read_project(config: PipelineConfig) -> ProjectMetadata:
    """Read the project at ``config.project_root``.

    Args:
        config: Pipeline configuration.

    Returns:
        ProjectMetadata with one RawUnit per reachable locked package.

    Raises:
        ConfigurationError: Missing or malformed input files, unlocatable sources.
        LockMismatchError: A declared dependency is absent from Cargo.lock.
        AmbiguousDependencyError: A lock reference matches several packages.
        UnsupportedError: A unit needs build scripts, proc macros, features,
            native links or workspaces.

    Example:
        >>> metadata = read_project(config)
        >>> str(metadata.root)
        'app v0.1.0'
    """
    for required in (config.manifest_path, config.lock_path):
        if not required.is_file():
            raise ConfigurationError(
                f"{required.name} not found in project root",
                file_path=str(required),
            )

    manifest = CargoManifest.from_toml(config.manifest_path)
    if manifest.workspace is not None:
        raise UnsupportedError(
            f"workspaces are not supported ({config.manifest_path} declares [workspace])"
        )
    lock = CargoLock.from_toml(config.lock_path)

    return _ProjectReader(config, lock).read(manifest)


@dataclass(frozen=True)
class _PendingUnit:
    package: LockPackage
    manifest_dir: Path
    manifest: CargoManifest
    kind: UnitKind


class _ProjectReader:
    """Breadth-first walk over locked packages starting at the root manifest."""

    def __init__(self, config: PipelineConfig, lock: CargoLock) -> None:
        self.config = config
        self.lock = lock
        self._log = logger.bind(component="reader", project_root=str(config.project_root))

    def read(self, root_manifest: CargoManifest) -> ProjectMetadata:
        package_section = root_manifest.package
        if package_section is None:
            raise ConfigurationError(
                "Missing [package] table",
                file_path=str(self.config.manifest_path),
                field_path="package",
            )
        if not isinstance(package_section.version, str):
            raise UnsupportedError(
                f"workspace-inherited version in {self.config.manifest_path} is not supported"
            )

        root_package = self._find_root_package(package_section.name, package_section.version)
        root_key = _key_of(root_package)

        units: dict[UnitKey, RawUnit] = {}
        queue: deque[_PendingUnit] = deque(
            [
                _PendingUnit(
                    package=root_package,
                    manifest_dir=self.config.project_root,
                    manifest=root_manifest,
                    kind=UnitKind.EXECUTABLE,
                )
            ]
        )
        queued: set[UnitKey] = {root_key}

        while queue:
            pending = queue.popleft()
            key = _key_of(pending.package)
            dependencies: list[RawDependency] = []

            for dep_key, spec in pending.manifest.normal_dependencies():
                provider = self._resolve_dependency(pending.package, dep_key, spec)
                provider_key = _key_of(provider)
                rename = crate_name(dep_key) if spec.package else None
                dependencies.append(RawDependency(key=provider_key, rename=rename))

                if provider_key in queued:
                    continue
                queued.add(provider_key)
                manifest_dir = self._locate(provider, pending.manifest_dir, spec)
                queue.append(
                    _PendingUnit(
                        package=provider,
                        manifest_dir=manifest_dir,
                        manifest=self._load_dependency_manifest(provider, manifest_dir),
                        kind=UnitKind.LIBRARY,
                    )
                )

            units[key] = self._build_unit(pending, tuple(dependencies))
            self._log.debug(
                "unit_read",
                unit=key.describe(),
                kind=pending.kind.value,
                dependencies=len(dependencies),
            )

        self._log.info("project_read", root=str(root_key), units=len(units))
        return ProjectMetadata(root=root_key, units=units)

    def _find_root_package(self, name: str, version: str) -> LockPackage:
        candidates = [
            package
            for package in self.lock.packages_named(name)
            if package.version == version and package.source is None
        ]
        if not candidates:
            raise ConfigurationError(
                f"Top-level package '{name} v{version}' is missing from {LOCK_FILE_NAME}",
                file_path=str(self.config.lock_path),
            )
        if len(candidates) > 1:
            raise AmbiguousDependencyError(
                f"{name} {version}",
                [_key_of(package).describe() for package in candidates],
            )
        return candidates[0]

    def _resolve_dependency(
        self,
        consumer: LockPackage,
        dep_key: str,
        spec: DependencySpec,
    ) -> LockPackage:
        """Map a manifest dependency to the locked package it resolved to."""
        consumer_name = str(_key_of(consumer))
        if spec.workspace:
            raise UnsupportedError(
                f"{consumer_name}: workspace-inherited dependency '{dep_key}' is not supported"
            )
        if spec.features:
            raise UnsupportedError(
                f"{consumer_name} enables features {', '.join(spec.features)} of '{dep_key}', "
                "which are not supported"
            )

        package_name = spec.package or dep_key
        references: list[DependencyReference] = []
        for text in consumer.dependencies:
            try:
                reference = DependencyReference.parse(text)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid dependency reference in package '{consumer.name}': {e}",
                    file_path=str(self.config.lock_path),
                ) from e
            if reference.name == package_name:
                references.append(reference)

        if not references:
            raise LockMismatchError(consumer_name, package_name)
        if len(references) > 1:
            raise AmbiguousDependencyError(
                package_name,
                [_reference_text(reference) for reference in references],
                internal_details=f"consumer={consumer_name} manifest_key={dep_key}",
            )

        reference = references[0]
        matches = self.lock.find(reference)
        if not matches:
            raise LockMismatchError(consumer_name, _reference_text(reference))
        if len(matches) > 1:
            raise AmbiguousDependencyError(
                _reference_text(reference),
                [_key_of(package).describe() for package in matches],
            )
        return matches[0]

    def _locate(self, package: LockPackage, consumer_dir: Path, spec: DependencySpec) -> Path:
        """Find the directory holding a locked package's sources."""
        key = _key_of(package)
        if key.is_local:
            if spec.path is None:
                raise ConfigurationError(
                    f"Local package '{package.name}' is locked without a source "
                    "but its consumer does not declare a path",
                    file_path=str(consumer_dir / MANIFEST_FILE_NAME),
                    field_path=f"dependencies.{package.name}",
                )
            return (consumer_dir / spec.path).resolve()
        source = package.source or ""
        if source.startswith(REGISTRY_SOURCE_PREFIXES):
            return self._locate_registry(package)
        if source.startswith(GIT_SOURCE_PREFIX):
            return self._locate_git(package, source)
        raise UnsupportedError(f"{key.describe()}: unsupported source kind")

    def _locate_registry(self, package: LockPackage) -> Path:
        registry_src = self.config.cargo_home / "registry" / "src"
        directory = f"{package.name}-{package.version}"
        candidates = sorted(registry_src.glob(f"*/{directory}"))
        for candidate in candidates:
            if (candidate / MANIFEST_FILE_NAME).is_file():
                return candidate
        raise ConfigurationError(
            f"Sources for {_key_of(package)} not found in the cargo registry cache; "
            "run 'cargo fetch' first",
            file_path=str(registry_src / "*" / directory),
        )

    def _locate_git(self, package: LockPackage, source: str) -> Path:
        _, _, revision = source.partition("#")
        if not revision:
            raise ConfigurationError(
                f"Git source for {_key_of(package)} has no locked revision",
                file_path=str(self.config.lock_path),
            )
        checkouts = self.config.cargo_home / "git" / "checkouts"
        short_id = revision[:GIT_SHORT_ID_LENGTH]
        for checkout in sorted(checkouts.glob(f"*/{short_id}")):
            for candidate in (checkout, *sorted(p for p in checkout.iterdir() if p.is_dir())):
                if _declares_package(candidate, package.name):
                    return candidate
        raise ConfigurationError(
            f"Git checkout for {_key_of(package)} not found in the cargo cache; "
            "run 'cargo fetch' first",
            file_path=str(checkouts / "*" / short_id),
        )

    def _load_dependency_manifest(self, package: LockPackage, manifest_dir: Path) -> CargoManifest:
        manifest_path = manifest_dir / MANIFEST_FILE_NAME
        manifest = CargoManifest.from_toml(manifest_path)
        declared = manifest.package.name if manifest.package is not None else None
        if declared != package.name:
            raise ConfigurationError(
                f"Expected package '{package.name}' but found '{declared}'",
                file_path=str(manifest_path),
                field_path="package.name",
            )
        return manifest

    def _build_unit(
        self, pending: _PendingUnit, dependencies: tuple[RawDependency, ...]
    ) -> RawUnit:
        key = _key_of(pending.package)
        manifest = pending.manifest
        manifest_path = pending.manifest_dir / MANIFEST_FILE_NAME
        package = _reject_unsupported(key, manifest, pending.manifest_dir)

        if pending.kind is UnitKind.EXECUTABLE:
            _reject_root_library(key, manifest, pending.manifest_dir)
            target = _binary_target(key, manifest)
            default_path = "src/main.rs"
        elif pending.kind is UnitKind.LIBRARY:
            target = _library_target(key, manifest)
            default_path = "src/lib.rs"
        else:
            raise ValueError(f"unknown unit kind: {pending.kind!r}")

        source_path = pending.manifest_dir / (target.path or default_path)
        if not source_path.is_file():
            raise ConfigurationError(
                f"Entry source file for {key} does not exist: {source_path}",
                file_path=str(manifest_path),
            )

        return RawUnit(
            key=key,
            kind=pending.kind,
            crate_name=crate_name(target.name or key.name),
            target_name=target.name or key.name,
            source_path=source_path,
            manifest_dir=pending.manifest_dir,
            edition=_edition(key, package, target, manifest_path),
            dependencies=dependencies,
        )


def _key_of(package: LockPackage) -> UnitKey:
    return UnitKey(name=package.name, version=package.version, source=package.source)


def _reference_text(reference: DependencyReference) -> str:
    text = reference.name
    if reference.version is not None:
        text += f" {reference.version}"
    if reference.source is not None:
        text += f" ({reference.source})"
    return text


def _declares_package(directory: Path, name: str) -> bool:
    manifest_path = directory / MANIFEST_FILE_NAME
    if not manifest_path.is_file():
        return False
    manifest = CargoManifest.from_toml(manifest_path)
    return manifest.package is not None and manifest.package.name == name


def _reject_unsupported(
    key: UnitKey, manifest: CargoManifest, manifest_dir: Path
) -> PackageSection:
    package = manifest.package
    if package is None:
        raise ConfigurationError(
            "Missing [package] table",
            file_path=str(manifest_dir / MANIFEST_FILE_NAME),
            field_path="package",
        )
    if isinstance(package.build, str) or (
        package.build is not False and (manifest_dir / "build.rs").is_file()
    ):
        raise UnsupportedError(f"{key} uses a build script, which is not supported")
    if package.links is not None:
        raise UnsupportedError(
            f"{key} links native library '{package.links}', which is not supported"
        )
    if manifest.features.get("default"):
        raise UnsupportedError(f"{key} enables default features, which are not supported")
    return package


def _reject_root_library(key: UnitKey, manifest: CargoManifest, manifest_dir: Path) -> None:
    if manifest.lib is not None or (manifest_dir / "src" / "lib.rs").is_file():
        raise UnsupportedError(
            f"{key} builds a library next to its binary; "
            "only a single binary target is supported for the top-level package"
        )


def _binary_target(key: UnitKey, manifest: CargoManifest) -> TargetSection:
    if len(manifest.bin) > 1:
        names = ", ".join(target.name or "?" for target in manifest.bin)
        raise UnsupportedError(
            f"{key} declares several binary targets ({names}); only one is supported"
        )
    if manifest.bin:
        return manifest.bin[0]
    return TargetSection()


def _library_target(key: UnitKey, manifest: CargoManifest) -> TargetSection:
    target = manifest.lib or TargetSection()
    if target.proc_macro:
        raise UnsupportedError(f"{key} is a procedural macro crate, which is not supported")
    if target.crate_type is not None and not {"lib", "rlib"} & set(target.crate_type):
        raise UnsupportedError(
            f"{key} only builds crate types {', '.join(target.crate_type)}; an rlib is required"
        )
    return target


def _edition(
    key: UnitKey,
    package: PackageSection,
    target: TargetSection,
    manifest_path: Path,
) -> str:
    edition = target.edition or package.edition
    if not isinstance(edition, str):
        raise UnsupportedError(f"{key}: workspace-inherited edition is not supported")
    if edition not in KNOWN_EDITIONS:
        raise ConfigurationError(
            f"Unknown edition '{edition}'",
            file_path=str(manifest_path),
            field_path="package.edition",
        )
    return edition


__all__ = [
    "find_project_root",
    "read_project",
]
