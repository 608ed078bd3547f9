#!/usr/bin/env python3

"""
Pytest configuration and shared fixtures for the yuv test suite.
"""

import os
import sys
import shutil
import tempfile
import pytest
from pathlib import Path

# Make the package importable without installing it
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

from yuv.repo.catalog import RepoTemplate, TYPE_THIRD, FAMILY_DATABASE
from yuv.system.detector import Detector, DistroIdentity

from release_samples import PROC_VERSION_X86


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that gets cleaned up after test"""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir

    if os.path.exists(temp_dir):
        shutil.rmtree(temp_dir)


@pytest.fixture
def release_files(temp_dir):
    """Build a Detector over fixture files; pass None to leave a file missing"""
    def _make(centos_release=None, redhat_release=None, os_release=None, proc_version=PROC_VERSION_X86):
        paths = {}
        for name, content in [
            ("centos-release", centos_release),
            ("redhat-release", redhat_release),
            ("os-release", os_release),
            ("version", proc_version),
        ]:
            path = os.path.join(temp_dir, name)
            if content is not None:
                with open(path, "w") as f:
                    f.write(content)
            paths[name] = path

        return Detector(
            centos_release=paths["centos-release"],
            redhat_release=paths["redhat-release"],
            os_release=paths["os-release"],
            proc_version=paths["version"],
        )
    return _make


@pytest.fixture
def mirror_template():
    """A public mirror template with a vault pattern"""
    return RepoTemplate(
        key="mirror",
        url_pattern="https://mirror.example.com/$distro/$releasever/AppStream/$basearch/os/",
        vault_url_pattern="https://vault.example.com/$distro/$releasever/AppStream/$basearch/os/",
        gpg_key_pattern="https://mirror.example.com/$distro/RPM-GPG-KEY-$distro-$releasever",
        priority=1,
    )


@pytest.fixture
def database_template():
    return RepoTemplate(
        key="mysql80",
        url_pattern="https://repo.example.com/mysql-8.0/el/$releasever/$basearch/",
        gpg_key_pattern="https://repo.example.com/RPM-GPG-KEY-mysql-$releasever",
        priority=5,
        repo_type=TYPE_THIRD,
        family=FAMILY_DATABASE,
    )


@pytest.fixture
def centos7():
    return DistroIdentity(name="centos", version="7.9.2009", arch="x86_64")


@pytest.fixture
def rocky9():
    return DistroIdentity(name="rockylinux", version="9.3", arch="x86_64")


@pytest.fixture
def fedora40():
    return DistroIdentity(name="fedora", version="40", arch="aarch64")


@pytest.fixture(autouse=True)
def setup_logging():
    """Set up logging for tests"""
    import logging

    logging.basicConfig(
        level=logging.WARNING,
        format="%(name)s - %(levelname)s - %(message)s"
    )


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
