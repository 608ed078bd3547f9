#!/usr/bin/env python3

import shutil
import logging
import subprocess
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


def detect_package_manager() -> str:
    """Prefer dnf, fall back to yum"""
    if shutil.which("dnf"):
        return "dnf"
    return "yum"


class PackageManager:
    """Thin pass-through to dnf/yum; output goes straight to the terminal"""

    def __init__(self, command: Optional[str] = None):
        if command in (None, "", "auto"):
            command = detect_package_manager()
        self.command = command

    def run(self, args: Sequence[str]) -> int:
        cmd = [self.command] + list(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, check=False)
        except FileNotFoundError:
            logger.error(f"{self.command} not found")
            return 127
        if result.returncode != 0:
            logger.debug(f"{self.command} exited with {result.returncode}")
        return result.returncode

    def install(self, packages: Sequence[str]) -> int:
        args: List[str] = ["install"]
        if "-y" not in packages:
            args.append("-y")
        return self.run(args + list(packages))

    def remove(self, packages: Sequence[str]) -> int:
        return self.run(["remove", "-y"] + list(packages))

    def update(self, packages: Sequence[str] = ()) -> int:
        return self.run(["update", "-y"] + list(packages))

    def upgrade(self) -> int:
        return self.run(["upgrade", "-y"])

    def erase(self, packages: Sequence[str]) -> int:
        return self.run(["erase", "-y"] + list(packages))

    def search(self, pattern: str) -> int:
        return self.run(["search", pattern])

    def list(self, args: Sequence[str] = ()) -> int:
        return self.run(["list"] + list(args))

    def info(self, packages: Sequence[str]) -> int:
        return self.run(["info"] + list(packages))

    def clean(self) -> int:
        return self.run(["clean", "all"])

    def makecache(self) -> int:
        return self.run(["makecache"])

    def downgrade(self, package: str) -> int:
        return self.run(["downgrade", "-y", package])

    def check_update(self) -> int:
        return self.run(["check-update"])

    def provides(self, path: str) -> int:
        return self.run(["provides", path])

    def whatprovides(self, feature: str) -> int:
        return self.run(["whatprovides", feature])

    def deplist(self, package: str) -> int:
        return self.run(["deplist", package])

    def history(self, args: Sequence[str] = ()) -> int:
        return self.run(["history"] + list(args))
