#!/usr/bin/env python3

from typing import Optional


class YuvError(Exception):
    """Base class for errors reported to the user"""


class DetectionError(YuvError):
    """No release file yielded a version, or no architecture matched"""

    def __init__(self, reason: str, path: Optional[str] = None):
        self.reason = reason
        self.path = path
        message = f"{reason} ({path})" if path else reason
        super().__init__(message)


class InvalidVersionError(YuvError, ValueError):
    """Leading version component is not an integer"""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid version: {value!r}")


class TemplateNotFoundError(YuvError, KeyError):
    """Unknown repository name"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"repo {self.name} not found"


class RepoFileError(YuvError):
    """Reading or writing a repo file or directory failed"""


class RepoFetchError(YuvError):
    """Downloading a curated repo file failed"""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"failed to fetch {url}: {reason}")


class ConfigError(YuvError, ValueError):
    """Configuration file is unreadable or invalid"""
