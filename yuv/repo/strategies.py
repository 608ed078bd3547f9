#!/usr/bin/env python3

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import requests

from ..errors import RepoFetchError, YuvError
from ..system.detector import DistroIdentity
from ..system.policy import SupportPolicy
from .catalog import RepoTemplate
from .resolver import SPLIT_COMPONENTS, SPLIT_DISTROS, render_repo_file, resolve, resolve_single

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30


@dataclass(frozen=True)
class RepoFile:
    filename: str
    content: str


@dataclass(frozen=True)
class CuratedRepoFile:
    """A pre-built repo file used instead of template resolution.

    Exactly one of url or content is set. Empty distros or major_versions
    match anything. use_only entries replace the whole mirror setup and
    are skipped when a single repository is added.
    """
    template_key: str
    filename: str
    url: str = ""
    content: str = ""
    distros: Tuple[str, ...] = ()
    major_versions: Tuple[str, ...] = ()
    exclude_distros: Tuple[str, ...] = ()
    use_only: bool = False

    def matches(self, template: RepoTemplate, identity: DistroIdentity) -> bool:
        if template.key != self.template_key:
            return False
        if identity.name in self.exclude_distros:
            return False
        if self.distros and identity.name not in self.distros:
            return False
        if self.major_versions and identity.major_version not in self.major_versions:
            return False
        return True


KUBERNETES_REPO = """[kubernetes]
name=Kubernetes
baseurl=https://mirrors.aliyun.com/kubernetes-new/core/stable/v1.28/rpm/
enabled=1
gpgcheck=1
gpgkey=https://mirrors.aliyun.com/kubernetes-new/core/stable/v1.28/rpm/repodata/repomd.xml.key
"""

DEFAULT_CURATED_FILES: Tuple[CuratedRepoFile, ...] = (
    CuratedRepoFile(
        template_key="aliyun",
        filename="aliyun.repo",
        url="https://mirrors.aliyun.com/repo/Centos-7.repo",
        distros=("centos",),
        major_versions=("7",),
        use_only=True,
    ),
    CuratedRepoFile(
        template_key="aliyun",
        filename="aliyun.repo",
        url="https://mirrors.aliyun.com/repo/Centos-vault-8.5.2111.repo",
        distros=("centos",),
        major_versions=("8",),
        use_only=True,
    ),
    CuratedRepoFile(
        template_key="docker",
        filename="docker-ce.repo",
        url="https://mirrors.aliyun.com/docker-ce/linux/centos/docker-ce.repo",
        exclude_distros=("almalinux", "fedora"),
    ),
    CuratedRepoFile(
        template_key="k8s",
        filename="kubernetes.repo",
        content=KUBERNETES_REPO,
        exclude_distros=("almalinux", "fedora"),
    ),
)


def fetch_repo_file(url: str) -> str:
    logger.info(f"Downloading repo file from {url}")
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise RepoFetchError(url, str(e))
    return response.text


class ResolutionStrategy(ABC):
    name = "strategy"

    @abstractmethod
    def applies(self, template: RepoTemplate, identity: DistroIdentity) -> bool:
        pass

    @abstractmethod
    def build(self, template: RepoTemplate, identity: DistroIdentity) -> List[RepoFile]:
        pass


class CuratedFileStrategy(ResolutionStrategy):
    name = "curated"

    def __init__(self, curated: Sequence[CuratedRepoFile] = DEFAULT_CURATED_FILES,
                 fetch: Callable[[str], str] = fetch_repo_file):
        self.curated = tuple(curated)
        self.fetch = fetch

    def without_use_only(self) -> "CuratedFileStrategy":
        return CuratedFileStrategy([entry for entry in self.curated if not entry.use_only], self.fetch)

    def filenames(self, template_key: str) -> List[str]:
        """Every file name this strategy may write for the template"""
        names: List[str] = []
        for entry in self.curated:
            if entry.template_key == template_key and entry.filename not in names:
                names.append(entry.filename)
        return names

    def find(self, template: RepoTemplate, identity: DistroIdentity) -> Optional[CuratedRepoFile]:
        for entry in self.curated:
            if entry.matches(template, identity):
                return entry
        return None

    def applies(self, template: RepoTemplate, identity: DistroIdentity) -> bool:
        return self.find(template, identity) is not None

    def build(self, template: RepoTemplate, identity: DistroIdentity) -> List[RepoFile]:
        entry = self.find(template, identity)
        if entry is None:
            raise YuvError(f"No curated repo file for {template.key} on {identity.name} {identity.version}")
        content = entry.content if entry.content else self.fetch(entry.url)
        return [RepoFile(entry.filename, content)]


class GenericTemplateStrategy(ResolutionStrategy):
    """Resolve the template against the detected identity.

    With split enabled, Rocky Linux and AlmaLinux get one file per
    BaseOS/AppStream component, otherwise a single file is produced.
    """

    name = "template"

    def __init__(self, policy: Optional[SupportPolicy] = None, split: bool = True):
        self.policy = policy or SupportPolicy()
        self.split = split

    def applies(self, template: RepoTemplate, identity: DistroIdentity) -> bool:
        return True

    def build(self, template: RepoTemplate, identity: DistroIdentity) -> List[RepoFile]:
        expired = self.policy.is_expired(identity.name, identity.version)

        if self.split and identity.name in SPLIT_DISTROS:
            configs = resolve(template, identity, expired)
            return [RepoFile(f"{template.key}-{component.lower()}.repo", config.render())
                    for component, config in zip(SPLIT_COMPONENTS, configs)]

        config = resolve_single(template, identity, expired)
        return [RepoFile(f"{template.key}.repo", render_repo_file([config]))]


def select_strategy(strategies: Sequence[ResolutionStrategy], template: RepoTemplate,
                    identity: DistroIdentity) -> ResolutionStrategy:
    """Return the first strategy that handles the template on this system"""
    for strategy in strategies:
        if strategy.applies(template, identity):
            logger.debug(f"Using {strategy.name} strategy for {template.key}")
            return strategy
    raise YuvError(f"No resolution strategy for {template.key} on {identity.name} {identity.version}")
