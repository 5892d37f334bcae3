"""Debian package assembly for generated prompt sets."""

import asyncio
import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from ..errors import PackagingError

logger = logging.getLogger(__name__)

DEFAULT_BUILD_TIMEOUT = 300.0


@dataclass(frozen=True)
class PackageSpec:
    """Metadata of the Debian package to build.

    Attributes:
        name: Debian package name
        version: Package version string
        maintainer: "Name <email>" maintainer field
        description: One-line package summary
        install_dir: Install location of the prompts, relative to /
        owner: System user and group that should own installed prompts
    """

    name: str
    version: str
    maintainer: str
    description: str
    install_dir: str = "var/lib/asterisk/sounds/en"
    owner: str = "asterisk"

    def control_file(self) -> str:
        return (
            f"Package: {self.name}\n"
            f"Version: {self.version}\n"
            "Section: sound\n"
            "Priority: optional\n"
            "Architecture: all\n"
            f"Maintainer: {self.maintainer}\n"
            f"Description: {self.description}\n"
        )

    def postinst_script(self) -> str:
        target = "/" + self.install_dir.strip("/")
        return (
            "#!/bin/sh\n"
            "set -e\n"
            "\n"
            f"if id {self.owner} >/dev/null 2>&1; then\n"
            f"    chown -R {self.owner}:{self.owner} {target}\n"
            "fi\n"
            f"chmod -R u=rwX,go=rX {target}\n"
            "\n"
            "exit 0\n"
        )


class DebianPackageBuilder:
    """Builds a .deb from an output root with dpkg-deb.

    Hidden files in the output root (the cache file, conversion scratch
    files) are left out of the package.
    """

    def __init__(
        self,
        spec: PackageSpec,
        dpkg_deb: str = "dpkg-deb",
        timeout: float = DEFAULT_BUILD_TIMEOUT,
    ) -> None:
        self.spec = spec
        self.dpkg_deb = dpkg_deb
        self.timeout = timeout

    def package_path(self, dest_dir: Path) -> Path:
        return Path(dest_dir) / f"{self.spec.name}_{self.spec.version}_all.deb"

    def stage(self, output_root: Path, build_dir: Path) -> None:
        """Lay out the package tree under build_dir.

        Raises:
            PackagingError: If the output root is missing or cannot be copied
        """
        output_root = Path(output_root)
        if not output_root.is_dir():
            raise PackagingError(f"Output directory not found: {output_root}")

        debian_dir = build_dir / "DEBIAN"
        install_dir = build_dir / self.spec.install_dir.strip("/")

        try:
            debian_dir.mkdir(parents=True, exist_ok=True)
            shutil.copytree(
                output_root,
                install_dir,
                ignore=shutil.ignore_patterns(".*"),
                dirs_exist_ok=True,
            )

            (debian_dir / "control").write_text(self.spec.control_file())
            postinst = debian_dir / "postinst"
            postinst.write_text(self.spec.postinst_script())
            postinst.chmod(0o755)
        except OSError as e:
            raise PackagingError(f"Failed to stage package tree: {e}", e) from e

    async def build(self, output_root: Path, dest_dir: Path | None = None) -> Path:
        """Build the package and return the path of the .deb file.

        Args:
            output_root: Directory of generated artifacts to package
            dest_dir: Where to write the .deb (defaults to the current directory)

        Raises:
            PackagingError: If staging or dpkg-deb fails
        """
        dest_dir = Path(dest_dir) if dest_dir else Path.cwd()
        deb_path = self.package_path(dest_dir)

        logger.info(f"Building Debian package {self.spec.name} {self.spec.version}...")

        # Build tree is always removed, success or not
        with tempfile.TemporaryDirectory(prefix="voicegen-deb-") as tmp:
            build_dir = Path(tmp) / "build"
            await asyncio.to_thread(self.stage, output_root, build_dir)

            dest_dir.mkdir(parents=True, exist_ok=True)
            cmd = [
                self.dpkg_deb,
                "--root-owner-group",
                "--build",
                str(build_dir),
                str(deb_path),
            ]

            try:
                proc = await asyncio.create_subprocess_exec(
                    *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
                )
            except FileNotFoundError as e:
                raise PackagingError(f"{self.dpkg_deb} not found", e) from e

            try:
                _, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
            except TimeoutError as e:
                proc.kill()
                await proc.wait()
                raise PackagingError(
                    f"{self.dpkg_deb} timed out after {self.timeout}s", e
                ) from e

            if proc.returncode != 0:
                raise PackagingError(
                    f"{self.dpkg_deb} failed with code {proc.returncode}: "
                    f"{stderr.decode(errors='replace').strip()}"
                )

        logger.info(f"Debian package created at: {deb_path}")
        return deb_path
