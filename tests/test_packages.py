"""Tests for apitestgen.packages -- package ownership and the package registry."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from apitestgen.exceptions import AssemblyError, PathNotOwnedError
from apitestgen.packages import LoadedPackage, PackageRegistry, load_packages, resolve_package


class TestResolvePackage:
    def test_nested_directory(self, src_root: Path) -> None:
        assert resolve_package(src_root, src_root / "myapp" / "tests") == "myapp.tests"

    def test_relative_paths(self, src_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(src_root.parent)
        assert resolve_package("src", "src/myapp") == "myapp"

    def test_directory_need_not_exist(self, src_root: Path) -> None:
        assert resolve_package(src_root, src_root / "myapp" / "generated") == "myapp.generated"

    def test_outside_root_raises(self, src_root: Path, tmp_path: Path) -> None:
        with pytest.raises(PathNotOwnedError, match="not inside source root"):
            resolve_package(src_root, tmp_path / "elsewhere")

    def test_root_itself_raises(self, src_root: Path) -> None:
        with pytest.raises(PathNotOwnedError, match="source root itself"):
            resolve_package(src_root, src_root)

    def test_invalid_component_raises(self, src_root: Path) -> None:
        with pytest.raises(PathNotOwnedError, match="my-app"):
            resolve_package(src_root, src_root / "my-app" / "tests")


class TestPackageRegistry:
    def test_local_name_is_last_component(self) -> None:
        package = LoadedPackage.from_path("myapp.v1.api")
        assert package.name == "api"

    def test_lookup(self) -> None:
        registry = PackageRegistry([LoadedPackage.from_path("myapp.api")])
        assert "myapp.api" in registry
        assert len(registry) == 1
        assert registry.lookup("myapp.api").name == "api"

    def test_lookup_missing_raises(self) -> None:
        with pytest.raises(AssemblyError, match="'myapp.other'"):
            PackageRegistry().lookup("myapp.other")


class TestLoadPackages:
    def test_module_file_under_root(self, src_root: Path) -> None:
        registry = load_packages(["myapp.api"], [src_root])
        assert registry.lookup("myapp.api").location == src_root / "myapp" / "api.py"

    def test_package_directory_under_root(self, src_root: Path) -> None:
        registry = load_packages(["myapp.tests"], [src_root])
        assert registry.lookup("myapp.tests").location == src_root / "myapp" / "tests" / "__init__.py"

    def test_installed_module(self) -> None:
        registry = load_packages(["email.mime"], [])
        assert "email.mime" in registry
        assert registry.lookup("email.mime").name == "mime"

    def test_missing_package_left_out(
        self, src_root: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="apitestgen"):
            registry = load_packages(["nowhere_to_be_found.api"], [src_root])
        assert len(registry) == 0
        assert "nowhere_to_be_found.api" in caplog.text
