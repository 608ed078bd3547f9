#!/usr/bin/env python3

import re
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..errors import DetectionError

logger = logging.getLogger(__name__)

CENTOS_RELEASE_PATH = "/etc/centos-release"
REDHAT_RELEASE_PATH = "/etc/redhat-release"
OS_RELEASE_PATH = "/etc/os-release"
PROC_VERSION_PATH = "/proc/version"

# Keeps long dotted versions such as "7.9.2009" that os-release truncates to "7"
CENTOS_RELEASE_PARSER = re.compile(r"CentOS.*release\s+([0-9.]+(?:\s+\(Core\))?)")
GENERIC_RELEASE_PARSER = re.compile(r".*release\s+([0-9.]+)")

# Order matters: first match wins
DISTRO_PATTERNS: List[Tuple[Tuple[str, ...], str]] = [
    (("centos",), "centos"),
    (("rocky",), "rockylinux"),
    (("alma",), "almalinux"),
    (("fedora",), "fedora"),
    (("rhel", "red hat"), "rhel"),
]

SUPPORTED_DISTROS = ("centos", "rockylinux", "almalinux", "fedora", "rhel")

ARCHITECTURES = ("x86_64", "i686", "aarch64", "armv7l")


@dataclass(frozen=True)
class DistroIdentity:
    name: str
    version: str
    arch: str

    @property
    def major_version(self) -> str:
        return self.version.split(".")[0]

    @property
    def supported(self) -> bool:
        return self.name in SUPPORTED_DISTROS


def normalize_distro_name(name: str) -> str:
    """Map a free-text distribution name to its canonical identifier"""
    lowered = name.lower()
    for patterns, canonical in DISTRO_PATTERNS:
        if any(pattern in lowered for pattern in patterns):
            return canonical
    return lowered


def detect_arch(content: str) -> str:
    for arch in ARCHITECTURES:
        if arch in content:
            return arch
    raise DetectionError("arch not found")


def parse_centos_release(content: str) -> Optional[str]:
    match = CENTOS_RELEASE_PARSER.search(content)
    if not match:
        return None
    return match.group(1).replace("(Core)", "").strip()


def parse_generic_release(content: str) -> Optional[str]:
    match = GENERIC_RELEASE_PARSER.search(content)
    if not match:
        return None
    return match.group(1)


def parse_os_release(content: str) -> Tuple[str, str]:
    """Return (NAME, VERSION_ID) from os-release text, empty when absent"""
    name = ""
    version = ""
    for line in content.splitlines():
        line = line.strip()
        if line.startswith("NAME="):
            name = _unquote(line[len("NAME="):])
        elif line.startswith("VERSION_ID="):
            version = _unquote(line[len("VERSION_ID="):])
    return name, version


def _unquote(value: str) -> str:
    return value.strip().strip('"').strip("'")


class Detector:
    """Detects the running distribution from the release files on disk.

    Every call re-reads the files; nothing is cached between calls.
    """

    def __init__(self,
                 centos_release: str = CENTOS_RELEASE_PATH,
                 redhat_release: str = REDHAT_RELEASE_PATH,
                 os_release: str = OS_RELEASE_PATH,
                 proc_version: str = PROC_VERSION_PATH):
        self.centos_release = centos_release
        self.redhat_release = redhat_release
        self.os_release = os_release
        self.proc_version = proc_version

    def detect(self) -> DistroIdentity:
        name, version = self.detect_distro()
        arch = self.detect_arch()
        identity = DistroIdentity(name=name, version=version, arch=arch)
        logger.debug(f"Detected {identity}")
        return identity

    def detect_distro(self) -> Tuple[str, str]:
        """Return the canonical distro name and the full version string"""
        content = self._read_optional(self.centos_release)
        if content is not None:
            version = parse_centos_release(content)
            if version:
                return normalize_distro_name("CentOS"), version

        content = self._read_optional(self.redhat_release)
        if content is not None:
            version = parse_generic_release(content)
            if version:
                name = ""
                os_release = self._read_optional(self.os_release)
                if os_release is not None:
                    name, _ = parse_os_release(os_release)
                return normalize_distro_name(name), version

        try:
            content = self._read(self.os_release)
        except OSError as e:
            raise DetectionError(f"no version: {e.strerror}", self.os_release)

        name, version = parse_os_release(content)
        if not version:
            raise DetectionError("no version", self.os_release)
        return normalize_distro_name(name), version

    def detect_arch(self) -> str:
        try:
            content = self._read(self.proc_version)
        except OSError as e:
            raise DetectionError(f"arch not found: {e.strerror}", self.proc_version)

        try:
            return detect_arch(content)
        except DetectionError:
            raise DetectionError("arch not found", self.proc_version)

    def _read(self, path: str) -> str:
        with open(path, "r") as f:
            return f.read()

    def _read_optional(self, path: str) -> Optional[str]:
        try:
            return self._read(path)
        except OSError as e:
            logger.debug(f"Skipping {path}: {e}")
            return None
