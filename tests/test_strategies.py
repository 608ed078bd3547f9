#!/usr/bin/env python3

import pytest
import requests
from unittest.mock import Mock, patch

from yuv.errors import RepoFetchError, YuvError
from yuv.repo.catalog import DEFAULT_CATALOG, RepoTemplate
from yuv.repo.strategies import (
    CuratedFileStrategy,
    CuratedRepoFile,
    GenericTemplateStrategy,
    RepoFile,
    fetch_repo_file,
    select_strategy,
)
from yuv.system.detector import DistroIdentity
from yuv.system.policy import SupportPolicy


class TestCuratedRepoFile:
    def test_matches_distro_and_major(self, centos7):
        entry = CuratedRepoFile(template_key="aliyun", filename="aliyun.repo", url="https://x",
                                distros=("centos",), major_versions=("7",))
        aliyun = DEFAULT_CATALOG.get("aliyun")

        assert entry.matches(aliyun, centos7)
        assert not entry.matches(aliyun, DistroIdentity("centos", "9", "x86_64"))
        assert not entry.matches(aliyun, DistroIdentity("rockylinux", "7", "x86_64"))
        assert not entry.matches(DEFAULT_CATALOG.get("redis"), centos7)

    def test_exclusions(self, rocky9):
        entry = CuratedRepoFile(template_key="docker", filename="docker-ce.repo", url="https://x",
                                exclude_distros=("almalinux", "fedora"))
        docker = DEFAULT_CATALOG.get("docker")

        assert entry.matches(docker, rocky9)
        assert not entry.matches(docker, DistroIdentity("almalinux", "9.4", "x86_64"))
        assert not entry.matches(docker, DistroIdentity("fedora", "40", "x86_64"))


class TestCuratedFileStrategy:
    """Test selection and loading of hand-curated repo files"""

    def test_default_centos7_file(self, centos7):
        fetch = Mock(return_value="[base]\nbaseurl=https://mirrors.aliyun.com/centos/7/os/x86_64/\n")
        strategy = CuratedFileStrategy(fetch=fetch)

        files = strategy.build(DEFAULT_CATALOG.get("aliyun"), centos7)

        fetch.assert_called_once_with("https://mirrors.aliyun.com/repo/Centos-7.repo")
        assert files == [RepoFile("aliyun.repo", fetch.return_value)]

    def test_default_centos8_vault_file(self):
        fetch = Mock(return_value="[base]\n")
        strategy = CuratedFileStrategy(fetch=fetch)

        strategy.build(DEFAULT_CATALOG.get("aliyun"), DistroIdentity("centos", "8.5.2111", "x86_64"))

        fetch.assert_called_once_with("https://mirrors.aliyun.com/repo/Centos-vault-8.5.2111.repo")

    def test_centos9_not_curated(self):
        strategy = CuratedFileStrategy(fetch=Mock())
        assert not strategy.applies(DEFAULT_CATALOG.get("aliyun"), DistroIdentity("centos", "9", "x86_64"))

    def test_inline_content_skips_fetch(self, rocky9):
        fetch = Mock()
        strategy = CuratedFileStrategy(fetch=fetch)

        files = strategy.build(DEFAULT_CATALOG.get("k8s"), rocky9)

        fetch.assert_not_called()
        assert files[0].filename == "kubernetes.repo"
        assert "[kubernetes]" in files[0].content

    def test_build_without_match(self, fedora40):
        strategy = CuratedFileStrategy(fetch=Mock())
        with pytest.raises(YuvError):
            strategy.build(DEFAULT_CATALOG.get("k8s"), fedora40)

    def test_without_use_only_drops_mirror_files(self, centos7, rocky9):
        fetch = Mock()
        strategy = CuratedFileStrategy(fetch=fetch).without_use_only()

        assert not strategy.applies(DEFAULT_CATALOG.get("aliyun"), centos7)
        assert strategy.applies(DEFAULT_CATALOG.get("docker"), rocky9)
        assert strategy.fetch is fetch

    def test_filenames(self):
        strategy = CuratedFileStrategy(fetch=Mock())

        assert strategy.filenames("docker") == ["docker-ce.repo"]
        assert strategy.filenames("k8s") == ["kubernetes.repo"]
        assert strategy.filenames("aliyun") == ["aliyun.repo"]
        assert strategy.filenames("redis") == []

    def test_injected_entries(self, fedora40):
        entry = CuratedRepoFile(template_key="mirror", filename="mirror.repo", content="[mirror]\n")
        template = RepoTemplate(key="mirror", url_pattern="https://m/")
        strategy = CuratedFileStrategy([entry])

        assert strategy.build(template, fedora40) == [RepoFile("mirror.repo", "[mirror]\n")]
        assert not strategy.applies(DEFAULT_CATALOG.get("aliyun"), DistroIdentity("centos", "7", "x86_64"))


class TestFetchRepoFile:
    def test_success(self):
        response = Mock(text="[repo]\n")
        with patch("yuv.repo.strategies.requests.get", return_value=response) as mock_get:
            assert fetch_repo_file("https://example.com/x.repo") == "[repo]\n"

        mock_get.assert_called_once_with("https://example.com/x.repo", timeout=30)
        response.raise_for_status.assert_called_once()

    def test_http_error(self):
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        with patch("yuv.repo.strategies.requests.get", return_value=response):
            with pytest.raises(RepoFetchError) as exc_info:
                fetch_repo_file("https://example.com/missing.repo")

        assert exc_info.value.url == "https://example.com/missing.repo"

    def test_connection_error_is_not_retried(self):
        with patch("yuv.repo.strategies.requests.get",
                   side_effect=requests.ConnectionError("refused")) as mock_get:
            with pytest.raises(RepoFetchError, match="refused"):
                fetch_repo_file("https://example.com/x.repo")

        assert mock_get.call_count == 1


class TestGenericTemplateStrategy:
    """Test template resolution into repo files"""

    def test_split_files(self, mirror_template, rocky9):
        files = GenericTemplateStrategy(split=True).build(mirror_template, rocky9)

        assert [f.filename for f in files] == ["mirror-baseos.repo", "mirror-appstream.repo"]
        assert "[mirror-BaseOS]" in files[0].content
        assert "/BaseOS/x86_64/os/" in files[0].content
        assert "[mirror-AppStream]" in files[1].content

    def test_single_file_when_split_disabled(self, mirror_template, rocky9):
        files = GenericTemplateStrategy(split=False).build(mirror_template, rocky9)

        assert [f.filename for f in files] == ["mirror.repo"]
        assert "baseurl=https://mirror.example.com/rockylinux/9.3/AppStream/x86_64/os/" in files[0].content

    def test_single_file_for_fedora(self, mirror_template, fedora40):
        files = GenericTemplateStrategy(split=True).build(mirror_template, fedora40)
        assert [f.filename for f in files] == ["mirror.repo"]

    def test_policy_selects_vault(self, mirror_template):
        identity = DistroIdentity("rockylinux", "8.9", "x86_64")

        files = GenericTemplateStrategy(split=True).build(mirror_template, identity)

        assert all("https://vault.example.com/" in f.content for f in files)

    def test_injected_policy(self, mirror_template, rocky9):
        strategy = GenericTemplateStrategy(SupportPolicy({"rockylinux": 10}), split=False)

        files = strategy.build(mirror_template, rocky9)

        assert "https://vault.example.com/rockylinux/9.3/" in files[0].content


class TestSelectStrategy:
    def test_curated_first(self, centos7):
        curated = CuratedFileStrategy(fetch=Mock())
        generic = GenericTemplateStrategy()

        chosen = select_strategy([curated, generic], DEFAULT_CATALOG.get("aliyun"), centos7)

        assert chosen is curated

    def test_generic_fallback(self, rocky9):
        curated = CuratedFileStrategy(fetch=Mock())
        generic = GenericTemplateStrategy()

        chosen = select_strategy([curated, generic], DEFAULT_CATALOG.get("aliyun"), rocky9)

        assert chosen is generic

    def test_no_strategy(self, rocky9):
        with pytest.raises(YuvError):
            select_strategy([CuratedFileStrategy(fetch=Mock())], DEFAULT_CATALOG.get("redis"), rocky9)
