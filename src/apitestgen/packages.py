"""Package identity: which package owns a directory, and which packages are loaded.

Two questions about Python packages come up during generation:

* **Which package will the generated module live in?** Answered by
  :func:`resolve_package` from a source root and the output directory
  (``/proj/src`` + ``/proj/src/myapp/tests`` -> ``myapp.tests``). A router
  declared in that same package is called without qualification.
* **What local name does a router's package get?** Answered by the
  :class:`PackageRegistry` built by :func:`load_packages`. Each registered
  package is bound under its last dotted component, matching the
  ``from parent import leaf`` statements the import reconciler writes.
"""

from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from apitestgen.exceptions import AssemblyError, PathNotOwnedError

logger = logging.getLogger(__name__)


def resolve_package(root: str | Path, directory: str | Path) -> str:
    """Return the dotted package that owns *directory* under *root*.

    Args:
        root: Source root, the directory that would sit on ``sys.path``.
        directory: Directory whose package is wanted.

    Returns:
        The dotted package path, e.g. ``"myapp.tests"``.

    Raises:
        PathNotOwnedError: If *directory* is not strictly inside *root* or one
            of the path components is not a valid identifier.
    """
    root_path = Path(root).resolve()
    dir_path = Path(directory).resolve()
    try:
        relative = dir_path.relative_to(root_path)
    except ValueError:
        raise PathNotOwnedError(
            f"{dir_path} is not inside source root {root_path}"
        ) from None

    parts = relative.parts
    if not parts:
        raise PathNotOwnedError(f"{dir_path} is the source root itself, not a package")
    invalid = [part for part in parts if not part.isidentifier()]
    if invalid:
        raise PathNotOwnedError(
            f"{dir_path} cannot be a package: invalid component(s) {', '.join(invalid)}"
        )
    return ".".join(parts)


@dataclass(frozen=True)
class LoadedPackage:
    """A package known to the generator.

    Attributes:
        path: Dotted import path (``"myapp.api"``).
        name: Local name the package is bound to in generated code (``"api"``).
        location: Where the package was found, if known.
    """

    path: str
    name: str
    location: Optional[Path] = None

    @classmethod
    def from_path(cls, path: str, location: Optional[Path] = None) -> "LoadedPackage":
        return cls(path=path, name=path.rpartition(".")[2], location=location)


class PackageRegistry:
    """Lookup table of loaded packages, keyed by dotted path."""

    def __init__(self, packages: Iterable[LoadedPackage] = ()) -> None:
        self._packages: dict[str, LoadedPackage] = {}
        for package in packages:
            self.add(package)

    def add(self, package: LoadedPackage) -> None:
        self._packages[package.path] = package

    def __contains__(self, path: object) -> bool:
        return path in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def lookup(self, path: str) -> LoadedPackage:
        """Return the package registered under *path*.

        Raises:
            AssemblyError: If no loaded package matches *path*.
        """
        package = self._packages.get(path)
        if package is None:
            raise AssemblyError(f"Router package {path!r} could not be resolved to a loaded package")
        return package


def _find_in_roots(path: str, roots: Sequence[Path]) -> Optional[Path]:
    relative = Path(*path.split("."))
    for root in roots:
        for candidate in (root / relative.with_suffix(".py"), root / relative / "__init__.py"):
            if candidate.is_file():
                return candidate
    return None


def _find_installed(path: str) -> Optional[Path]:
    try:
        spec = importlib.util.find_spec(path)
    except (ImportError, ValueError):
        return None
    if spec is None:
        return None
    return Path(spec.origin) if spec.origin else None


def load_packages(paths: Iterable[str], roots: Sequence[str | Path] = ()) -> PackageRegistry:
    """Build a registry of the packages in *paths* that can be found.

    Each path is looked up as a source file under one of *roots* first and
    then among installed modules. Paths that cannot be found are left out,
    so a later :meth:`PackageRegistry.lookup` raises
    :class:`~apitestgen.exceptions.AssemblyError` for them.
    """
    root_paths = [Path(root) for root in roots]
    registry = PackageRegistry()
    for path in sorted(set(paths)):
        location = _find_in_roots(path, root_paths) or _find_installed(path)
        if location is None:
            logger.warning("Package %s not found under %s or installed", path, root_paths)
            continue
        logger.debug("Loaded package %s from %s", path, location)
        registry.add(LoadedPackage.from_path(path, location))
    return registry
