#!/usr/bin/env python3

"""
Expand repository templates into yum/dnf repository sections.

Resolution is a pure function of the template, the detected identity and
the expiry decision: nothing here touches the filesystem or the network.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

from ..system.detector import DistroIdentity
from ..system.policy import major_version
from .catalog import FAMILY_DATABASE, RepoTemplate

logger = logging.getLogger(__name__)

# Distributions whose repositories are split into BaseOS and AppStream
SPLIT_DISTROS = ("rockylinux", "almalinux")
SPLIT_COMPONENTS = ("BaseOS", "AppStream")
COMPONENT_PLACEHOLDER = "AppStream"


@dataclass(frozen=True)
class ResolvedRepoConfig:
    section_id: str
    display_name: str
    base_url: str
    gpg_key_url: str
    enabled: bool
    priority: int

    def render(self) -> str:
        return (
            f"[{self.section_id}]\n"
            f"name={self.display_name}\n"
            f"baseurl={self.base_url}\n"
            f"enabled={1 if self.enabled else 0}\n"
            f"gpgcheck=1\n"
            f"gpgkey={self.gpg_key_url}\n"
            f"priority={self.priority}\n"
        )


def render_repo_file(configs: Iterable[ResolvedRepoConfig]) -> str:
    return "\n".join(config.render() for config in configs)


def substitute(pattern: str, distro: str, releasever: str, basearch: str) -> str:
    """Replace $distro, $releasever and $basearch; other tokens are kept"""
    result = pattern.replace("$distro", distro)
    result = result.replace("$releasever", releasever)
    result = result.replace("$basearch", basearch)
    return result


def url_releasever(template: RepoTemplate, version: str) -> str:
    if template.family == FAMILY_DATABASE:
        return version.split(".")[0]
    return version


def select_pattern(template: RepoTemplate, expired: bool) -> str:
    if expired and template.vault_url_pattern:
        return template.vault_url_pattern
    return template.url_pattern


def gpg_key_url(template: RepoTemplate, identity: DistroIdentity) -> str:
    if not template.gpg_key_pattern:
        return ""
    return substitute(template.gpg_key_pattern, identity.name, identity.version, identity.arch)


def _is_centos7(identity: DistroIdentity) -> bool:
    return identity.name == "centos" and identity.major_version == "7"


def resolve_single(template: RepoTemplate, identity: DistroIdentity, expired: bool) -> ResolvedRepoConfig:
    # Raises InvalidVersionError before any URL is built
    major_version(identity.version)

    pattern = select_pattern(template, expired)
    url = substitute(pattern, identity.name, url_releasever(template, identity.version), identity.arch)

    # CentOS 7 has no AppStream split. Only AppStream is rewritten here,
    # resolve_component rewrites BaseOS as well.
    if _is_centos7(identity):
        url = url.replace(f"/AppStream/{identity.arch}/os/", f"/os/{identity.arch}/")

    return ResolvedRepoConfig(
        section_id=template.key,
        display_name=f"{template.key} Repository",
        base_url=url,
        gpg_key_url=gpg_key_url(template, identity),
        enabled=template.enabled_by_default,
        priority=template.priority,
    )


def resolve_component(template: RepoTemplate, identity: DistroIdentity, expired: bool,
                      component: str) -> ResolvedRepoConfig:
    # Raises InvalidVersionError before any URL is built
    major_version(identity.version)

    pattern = select_pattern(template, expired).replace(COMPONENT_PLACEHOLDER, component)
    url = substitute(pattern, identity.name, url_releasever(template, identity.version), identity.arch)

    if _is_centos7(identity):
        url = url.replace(f"/AppStream/{identity.arch}/os/", f"/os/{identity.arch}/")
        url = url.replace(f"/BaseOS/{identity.arch}/os/", f"/os/{identity.arch}/")

    return ResolvedRepoConfig(
        section_id=f"{template.key}-{component}",
        display_name=f"{template.key} {component} Repository",
        base_url=url,
        gpg_key_url=gpg_key_url(template, identity),
        enabled=template.enabled_by_default,
        priority=template.priority,
    )


def resolve(template: RepoTemplate, identity: DistroIdentity, expired: bool) -> List[ResolvedRepoConfig]:
    if identity.name in SPLIT_DISTROS:
        configs = [resolve_component(template, identity, expired, component)
                   for component in SPLIT_COMPONENTS]
    else:
        configs = [resolve_single(template, identity, expired)]

    for config in configs:
        logger.debug(f"Resolved {config.section_id} -> {config.base_url}")
    return configs
