"""Package manager collaborators for the npm resolver.

The resolver only needs three things from a package manager: a listing of
installed package directories, a way to install packages, and a decision
whether installing should be skipped. ``NpmCli`` drives the ``npm``
executable; ``NodeModulesWalker`` reads an existing ``node_modules`` tree.
"""

from __future__ import annotations

import logging
import os
import queue
import shutil
import subprocess
import sys
import threading
from pathlib import Path
from typing import IO, List, Optional, Protocol, runtime_checkable

from npmlicense.resolvers.base import PackageInstallError, PackageListError

logger = logging.getLogger("npmlicense.resolvers.npm.package_manager")

NODE_MODULES = "node_modules"


@runtime_checkable
class PackageManager(Protocol):
    """Narrow interface the npm resolver depends on."""

    def list_pkg_paths(self, root_dir: Path) -> str:
        """List installed package directories under ``root_dir``.

        Args:
            root_dir: The ``node_modules`` directory of a project.

        Returns:
            str: Absolute package directories, one per line.

        Raises:
            PackageListError: If the listing cannot be produced.
        """

    def install_pkgs(self, project_dir: Path) -> None:
        """Install the project's packages.

        Raises:
            PackageInstallError: If installation fails or times out.
        """

    def need_skip_install_pkgs(self) -> bool:
        """Decide whether the installation step should be skipped."""


def _project_dir(root_dir: Path) -> Path:
    return root_dir.parent if root_dir.name == NODE_MODULES else root_dir


class NpmCli:
    """PackageManager backed by the ``npm`` command line client."""

    NAME = "npm_cli"
    LIST_ARGS = ["ls", "--all", "--omit=dev", "--parseable"]
    INSTALL_ARGS = ["install"]

    def __init__(
        self,
        executable: Optional[str] = None,
        skip_install: bool = False,
        prompt_timeout: float = 5.0,
        install_timeout: float = 600.0,
        list_timeout: float = 120.0,
        input_stream: Optional[IO[str]] = None,
    ) -> None:
        """Initialize the npm client wrapper.

        Args:
            executable: npm executable; looked up on PATH when omitted.
            skip_install: Never install packages.
            prompt_timeout: Seconds to wait for an interactive skip answer.
            install_timeout: Seconds before ``npm install`` is abandoned.
            list_timeout: Seconds before ``npm ls`` is abandoned.
            input_stream: Stream the skip answer is read from (stdin by default).
        """
        self.executable = executable or shutil.which("npm") or "npm"
        self.skip_install = skip_install
        self.prompt_timeout = prompt_timeout
        self.install_timeout = install_timeout
        self.list_timeout = list_timeout
        self._input = input_stream if input_stream is not None else sys.stdin

    def list_pkg_paths(self, root_dir: Path) -> str:
        cwd = _project_dir(Path(root_dir))
        cmd = [self.executable, *self.LIST_ARGS]
        logger.debug("Listing packages: %s (cwd=%s)", " ".join(cmd), cwd)

        try:
            proc = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.list_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise PackageListError(
                f"npm ls timed out after {self.list_timeout:g}s in {cwd}"
            ) from e
        except OSError as e:
            raise PackageListError(f"Cannot run {self.executable}: {e}") from e

        if proc.returncode != 0:
            # npm ls exits non-zero on missing or invalid peers but still
            # prints everything it found.
            logger.warning(
                "npm ls exited with %d in %s: %s",
                proc.returncode,
                cwd,
                (proc.stderr or "").strip()[:500],
            )
            if not proc.stdout:
                raise PackageListError(f"npm ls produced no output in {cwd}")

        return proc.stdout or ""

    def install_pkgs(self, project_dir: Path) -> None:
        cmd = [self.executable, *self.INSTALL_ARGS]
        logger.info("Installing packages in %s", project_dir)

        try:
            subprocess.run(
                cmd,
                cwd=project_dir,
                capture_output=True,
                text=True,
                timeout=self.install_timeout,
                check=True,
            )
        except subprocess.TimeoutExpired as e:
            raise PackageInstallError(
                f"npm install timed out after {self.install_timeout:g}s"
            ) from e
        except subprocess.CalledProcessError as e:
            raise PackageInstallError(
                f"npm install failed ({e.returncode}): {(e.stderr or '').strip()[:500]}"
            ) from e
        except OSError as e:
            raise PackageInstallError(f"Cannot run {self.executable}: {e}") from e

        logger.info("Installed packages in %s", project_dir)

    def need_skip_install_pkgs(self) -> bool:
        """Ask the user whether to skip ``npm install``.

        Configured skips win. Without an interactive input the install always
        runs; otherwise the user has ``prompt_timeout`` seconds to answer
        ``s`` / ``S``.
        """
        if self.skip_install:
            logger.info("Skipping package installation (configured)")
            return True

        isatty = getattr(self._input, "isatty", None)
        if not callable(isatty) or not isatty():
            return False

        logger.warning(
            "Try to install nodejs packages in %g seconds, press [s/S] and ENTER to skip",
            self.prompt_timeout,
        )
        answer = self._read_answer(self.prompt_timeout)
        if answer is None:
            logger.info("Time out, will install packages")
            return False
        if answer.strip() in ("s", "S"):
            logger.info("Skipping package installation")
            return True
        return False

    def _read_answer(self, timeout: float) -> Optional[str]:
        answers: "queue.Queue[str]" = queue.Queue(maxsize=1)

        def _reader() -> None:
            try:
                answers.put(self._input.readline())
            except (OSError, ValueError):
                answers.put("")

        threading.Thread(target=_reader, name="npm-install-prompt", daemon=True).start()
        try:
            return answers.get(timeout=timeout)
        except queue.Empty:
            return None


class NodeModulesWalker:
    """PackageManager that walks an existing ``node_modules`` directory.

    Nothing is ever installed. Scoped packages (``@scope/name``) and nested
    ``node_modules`` directories are listed; ``.bin`` and other dot
    directories are not.
    """

    NAME = "node_modules_walker"

    def list_pkg_paths(self, root_dir: Path) -> str:
        root_dir = Path(root_dir)
        if not root_dir.is_dir():
            logger.info("No %s directory at %s", NODE_MODULES, root_dir)
            return ""
        return "\n".join(self._walk(root_dir.resolve()))

    def install_pkgs(self, project_dir: Path) -> None:
        logger.debug("NodeModulesWalker does not install packages (%s)", project_dir)

    def need_skip_install_pkgs(self) -> bool:
        return True

    def _walk(self, modules_dir: Path) -> List[str]:
        paths: List[str] = []
        stack = [modules_dir]

        while stack:
            current = stack.pop()
            found: List[Path] = []
            for entry in self._subdirs(current):
                if entry.name.startswith("."):
                    continue
                if entry.name.startswith("@"):
                    found.extend(
                        scoped for scoped in self._subdirs(entry)
                        if not scoped.name.startswith(".")
                    )
                else:
                    found.append(entry)

            nested: List[Path] = []
            for pkg_dir in found:
                paths.append(str(pkg_dir))
                inner = pkg_dir / NODE_MODULES
                if inner.is_dir():
                    nested.append(inner)
            # Reversed so nested trees are visited in name order.
            stack.extend(reversed(nested))

        return paths

    @staticmethod
    def _subdirs(directory: Path) -> List[Path]:
        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except OSError as e:
            logger.debug("Cannot scan %s: %s", directory, e)
            return []
        return [Path(e.path) for e in entries if e.is_dir()]


__all__ = ["NODE_MODULES", "PackageManager", "NpmCli", "NodeModulesWalker"]
