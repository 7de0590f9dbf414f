"""Tests for the npm license resolver pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import pytest

from npmlicense.config import DepsConfig
from npmlicense.resolvers.base import PackageInstallError, PackageListError
from npmlicense.resolvers.models import Package
from npmlicense.resolvers.npm.platforms import HostPlatform
from npmlicense.resolvers.npm.resolver import NpmResolver

LINUX_X64 = HostPlatform(os="linux", arch="x64")


class FakePackageManager:
    """PackageManager returning a canned listing."""

    def __init__(
        self,
        output: str = "",
        list_error: Optional[Exception] = None,
        skip_install: bool = True,
        install_error: Optional[Exception] = None,
    ) -> None:
        self.output = output
        self.list_error = list_error
        self.skip_install = skip_install
        self.install_error = install_error
        self.listed: List[Path] = []
        self.installed: List[Path] = []

    def list_pkg_paths(self, root_dir: Path) -> str:
        self.listed.append(root_dir)
        if self.list_error is not None:
            raise self.list_error
        return self.output

    def install_pkgs(self, project_dir: Path) -> None:
        self.installed.append(project_dir)
        if self.install_error is not None:
            raise self.install_error

    def need_skip_install_pkgs(self) -> bool:
        return self.skip_install


def _add_pkg(modules: Path, name: str, manifest=None, license_text: Optional[str] = None) -> Path:
    pkg_dir = modules / name
    pkg_dir.mkdir(parents=True)
    if manifest is not None:
        (pkg_dir / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    if license_text is not None:
        (pkg_dir / "LICENSE").write_text(license_text, encoding="utf-8")
    return pkg_dir


def _project(tmp_path: Path) -> Path:
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "app", "version": "1.0.0", "license": "MIT"}), encoding="utf-8"
    )
    modules = tmp_path / "node_modules"
    modules.mkdir()
    return modules


def test_can_resolve_only_package_json() -> None:
    """Only files named exactly package.json are handled."""
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    assert resolver.can_resolve("package.json")
    assert resolver.can_resolve("/some/project/package.json")
    assert not resolver.can_resolve("Package.json")
    assert not resolver.can_resolve("package-lock.json")
    assert not resolver.can_resolve("")


def test_get_installed_pkgs_in_listing_order() -> None:
    """Each listed path becomes a package named after its final segment."""
    pm = FakePackageManager("/proj\n/proj/node_modules/zeta\n/proj/node_modules/@scope/alpha/\n")
    resolver = NpmResolver(package_manager=pm, host=LINUX_X64)

    pkgs = resolver.get_installed_pkgs("/proj/node_modules")

    assert pkgs == [
        Package(name="zeta", path="/proj/node_modules/zeta"),
        Package(name="alpha", path="/proj/node_modules/@scope/alpha/"),
    ]
    assert pm.listed == [Path("/proj/node_modules")]


def test_get_installed_pkgs_skips_blank_lines() -> None:
    """Blank and whitespace-only lines are ignored."""
    pm = FakePackageManager("\n  \n/proj/node_modules/a\r\n\n/proj/node_modules/b\n")
    resolver = NpmResolver(package_manager=pm, host=LINUX_X64)

    assert [p.name for p in resolver.get_installed_pkgs("/proj/node_modules")] == ["a", "b"]


def test_get_installed_pkgs_empty_output() -> None:
    """No output means no packages."""
    resolver = NpmResolver(package_manager=FakePackageManager(""), host=LINUX_X64)
    assert resolver.get_installed_pkgs("/proj/node_modules") == []


def test_get_installed_pkgs_lister_failure() -> None:
    """A listing failure degrades to an empty list."""
    pm = FakePackageManager(list_error=PackageListError("npm missing"))
    resolver = NpmResolver(package_manager=pm, host=LINUX_X64)

    assert resolver.get_installed_pkgs("/proj/node_modules") == []


def test_cross_platform_package_is_not_read() -> None:
    """Foreign platform packages are skipped without touching the path."""
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    result = resolver.resolve_package_license("pkg-darwin-arm64", "/fake/path")

    assert result.is_cross_platform
    assert result.package_name == "pkg-darwin-arm64"
    assert result.path == "/fake/path"
    assert result.license_spdx_id == ""
    assert result.resolve_errors == []


def test_matching_platform_package_is_resolved(tmp_path: Path) -> None:
    """A package built for the host goes through the normal pipeline."""
    pkg_dir = _add_pkg(tmp_path, "linux-x64", {"name": "@esbuild/linux-x64", "license": "MIT"})
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    result = resolver.resolve_package_license("linux-x64", pkg_dir)

    assert not result.is_cross_platform
    assert result.license_spdx_id == "MIT"


def test_resolve_package_license_from_manifest_and_file(tmp_path: Path) -> None:
    """The license field and LICENSE text are both collected."""
    pkg_dir = _add_pkg(
        tmp_path,
        "normal-pkg",
        {"name": "normal-pkg", "version": "2.1.0", "license": "Apache-2.0"},
        license_text="Apache License\nVersion 2.0",
    )
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    result = resolver.resolve_package_license("normal-pkg", pkg_dir)

    assert result.license_spdx_id == "Apache-2.0"
    assert result.version == "2.1.0"
    assert result.license_content.startswith("Apache License")
    assert Path(result.license_file_path) == (pkg_dir / "LICENSE").absolute()
    assert result.resolve_errors == []


def test_resolve_package_license_legacy_licenses(tmp_path: Path) -> None:
    """The licenses array is used when license is unusable."""
    pkg_dir = _add_pkg(
        tmp_path,
        "legacy",
        {"name": "legacy", "licenses": [{"type": "MIT"}, {"type": "GPL-2.0"}]},
    )
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    assert resolver.resolve_package_license("legacy", pkg_dir).license_spdx_id == "MIT OR GPL-2.0"


def test_resolve_package_license_without_manifest(tmp_path: Path) -> None:
    """A missing manifest is recorded but the license file is still read."""
    pkg_dir = _add_pkg(tmp_path, "bare", license_text="ISC")
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    result = resolver.resolve_package_license("bare", pkg_dir)

    assert result.license_spdx_id == ""
    assert result.license_content == "ISC"
    assert len(result.resolve_errors) == 1


def test_resolve_package_license_deeply_nested_manifest(tmp_path: Path) -> None:
    """A manifest the decoder cannot handle degrades the result only."""
    pkg_dir = tmp_path / "deep"
    pkg_dir.mkdir()
    (pkg_dir / "package.json").write_text(
        '{"name": "deep", "license": "MIT", "x": ' + "[" * 200000 + "]" * 200000 + "}",
        encoding="utf-8",
    )
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    result = resolver.resolve_package_license("deep", pkg_dir)

    assert result.license_spdx_id == ""
    assert len(result.resolve_errors) == 2


def test_resolve_package_license_unparseable_field(tmp_path: Path) -> None:
    """An unusable license field is recorded as an error."""
    pkg_dir = _add_pkg(tmp_path, "odd", {"name": "odd", "license": 42})
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    result = resolver.resolve_package_license("odd", pkg_dir)

    assert result.license_spdx_id == ""
    assert any("cannot parse license field" in e for e in result.resolve_errors)


def test_resolve_package_license_override(tmp_path: Path) -> None:
    """Configured overrides win over the manifest."""
    pkg_dir = _add_pkg(tmp_path, "odd", {"name": "odd", "version": "0.1.0", "license": "SEE LICENSE"})
    config = DepsConfig.model_validate(
        {"licenses": [{"name": "odd", "license": "BSD-3-Clause", "version": "0.1.0"}]}
    )
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    assert resolver.resolve_package_license("odd", pkg_dir, config).license_spdx_id == "BSD-3-Clause"


def test_resolve_builds_report(tmp_path: Path) -> None:
    """Packages land in the resolved, skipped or cross-platform bucket."""
    modules = _project(tmp_path)
    normal = _add_pkg(modules, "normal-pkg", {"name": "normal-pkg", "license": "Apache-2.0"}, "text")
    legacy = _add_pkg(modules, "legacy", {"name": "legacy", "licenses": [{"type": "MIT"}]})
    unknown = _add_pkg(modules, "unknown", {"name": "unknown"})
    ignored = _add_pkg(modules, "internal-tool", {"name": "internal-tool", "license": "UNLICENSED"})
    foreign = modules / "pkg-darwin-arm64"
    listing = "\n".join(str(p) for p in [tmp_path, normal, legacy, unknown, ignored, foreign])
    pm = FakePackageManager(listing)
    config = DepsConfig.model_validate({"excludes": [{"name": "internal-*"}]})

    report = NpmResolver(package_manager=pm, host=LINUX_X64).resolve(tmp_path / "package.json", config)

    assert [r.package_name for r in report.resolved] == ["normal-pkg", "legacy"]
    assert [r.license_spdx_id for r in report.resolved] == ["Apache-2.0", "MIT"]
    assert [r.package_name for r in report.skipped] == ["unknown"]
    assert [r.package_name for r in report.cross_platform] == ["pkg-darwin-arm64"]
    assert report.summary() == {"resolved": 2, "skipped": 1, "cross_platform": 1}
    assert pm.listed == [tmp_path / "node_modules"]
    assert pm.installed == []


def test_resolve_excludes_scoped_packages(tmp_path: Path) -> None:
    """Exclude globs match the @scope/name form of scoped packages."""
    modules = _project(tmp_path)
    types_node = _add_pkg(modules, "@types/node", {"name": "@types/node", "license": "MIT"})
    babel_core = _add_pkg(modules, "@babel/core", {"name": "@babel/core", "license": "MIT"})
    pm = FakePackageManager(f"{types_node}\n{babel_core}/\n")
    config = DepsConfig.model_validate({"excludes": [{"name": "@types/*"}]})

    report = NpmResolver(package_manager=pm, host=LINUX_X64).resolve(tmp_path / "package.json", config)

    assert [r.package_name for r in report.resolved] == ["core"]


def test_resolve_installs_and_survives_install_failure(tmp_path: Path) -> None:
    """An install failure is logged and resolution continues."""
    modules = _project(tmp_path)
    pkg = _add_pkg(modules, "a", {"name": "a", "license": "MIT"})
    pm = FakePackageManager(str(pkg), skip_install=False, install_error=PackageInstallError("offline"))

    report = NpmResolver(package_manager=pm, host=LINUX_X64).resolve(tmp_path / "package.json")

    assert pm.installed == [tmp_path]
    assert [r.package_name for r in report.resolved] == ["a"]


def test_resolve_parallel_keeps_listing_order(tmp_path: Path) -> None:
    """Concurrent resolution reports packages in listing order."""
    modules = _project(tmp_path)
    names = [f"pkg{i:02d}" for i in range(20)]
    paths = [_add_pkg(modules, n, {"name": n, "license": "MIT"}) for n in reversed(names)]
    pm = FakePackageManager("\n".join(str(p) for p in paths))
    config = DepsConfig(workers=4)

    report = NpmResolver(package_manager=pm, host=LINUX_X64).resolve(tmp_path / "package.json", config)

    assert [r.package_name for r in report.resolved] == list(reversed(names))


def test_resolve_rejects_other_manifests(tmp_path: Path) -> None:
    """Only package.json projects are accepted."""
    resolver = NpmResolver(package_manager=FakePackageManager(), host=LINUX_X64)

    with pytest.raises(ValueError):
        resolver.resolve(tmp_path / "pom.xml")


def test_from_config_applies_host_override() -> None:
    """Configured host components replace the detected ones."""
    config = DepsConfig.model_validate({"host": {"os": "darwin", "arch": "aarch64"}})

    resolver = NpmResolver.from_config(config, package_manager=FakePackageManager())

    assert resolver.host == HostPlatform(os="darwin", arch="arm64")
    assert resolver.host.matches("pkg-darwin-arm64")
