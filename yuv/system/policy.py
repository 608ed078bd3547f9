#!/usr/bin/env python3

import re
import logging
from typing import Dict, Mapping, Optional

from ..errors import InvalidVersionError

logger = logging.getLogger(__name__)

# Oldest major release still served from the live mirrors
DEFAULT_SUPPORT_BASELINE: Dict[str, int] = {
    "centos": 9,
    "rockylinux": 9,
    "almalinux": 9,
    "fedora": 40,
    "rhel": 9,
}

_MAJOR_PARSER = re.compile(r"[0-9]+")


def major_version(version: str) -> int:
    major = version.split(".")[0]
    if not _MAJOR_PARSER.fullmatch(major):
        raise InvalidVersionError(version)
    return int(major)


class SupportPolicy:
    def __init__(self, baseline: Optional[Mapping[str, int]] = None):
        if baseline is None:
            baseline = DEFAULT_SUPPORT_BASELINE
        self.baseline: Dict[str, int] = dict(baseline)

    def is_expired(self, distro: str, version: str) -> bool:
        """True when the release is older than the supported baseline.

        The version is validated even for distributions without a baseline,
        which are never considered expired.
        """
        major = major_version(version)
        minimum = self.baseline.get(distro)
        if minimum is None:
            return False
        expired = major < minimum
        if expired:
            logger.info(f"{distro} {version} is past its support window (< {minimum}), using vault mirrors")
        return expired
