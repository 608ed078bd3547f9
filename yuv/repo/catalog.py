#!/usr/bin/env python3

from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import ConfigError, TemplateNotFoundError

TYPE_PUBLIC = "public"  # public mirror replacing the distribution repos
TYPE_THIRD = "third"    # upstream third-party repository
TYPE_CUSTOM = "custom"  # user-defined in the config file

FAMILY_DEFAULT = "default"
FAMILY_DATABASE = "database"  # versioned by major release only


@dataclass(frozen=True)
class RepoTemplate:
    key: str
    url_pattern: str
    vault_url_pattern: str = ""
    gpg_key_pattern: str = ""
    enabled_by_default: bool = True
    priority: int = 1
    repo_type: str = TYPE_PUBLIC
    family: str = FAMILY_DEFAULT


def template_from_dict(key: str, data: Mapping[str, Any]) -> RepoTemplate:
    """Build a custom template from a config file entry"""
    known = {f.name for f in fields(RepoTemplate)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown fields for repo {key}: {', '.join(sorted(unknown))}")
    if not data.get("url_pattern"):
        raise ConfigError(f"Repo {key} has no url_pattern")

    values = dict(data)
    values["key"] = key
    values.setdefault("repo_type", TYPE_CUSTOM)
    return RepoTemplate(**values)


class RepoCatalog:
    """Read-only registry of repository templates"""

    def __init__(self, templates: Iterable[RepoTemplate], aliases: Optional[Mapping[str, str]] = None):
        self._templates = MappingProxyType({t.key: t for t in templates})
        self._aliases = MappingProxyType(dict(aliases or {}))

    def get(self, name: str) -> RepoTemplate:
        key = self._aliases.get(name, name)
        template = self._templates.get(key)
        if template is None:
            raise TemplateNotFoundError(name)
        return template

    def __contains__(self, name: str) -> bool:
        return self._aliases.get(name, name) in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def names(self) -> List[str]:
        return sorted(self._templates)

    def by_type(self, repo_type: str) -> Dict[str, RepoTemplate]:
        return {key: t for key, t in self._templates.items() if t.repo_type == repo_type}

    def with_templates(self, extra: Iterable[RepoTemplate]) -> "RepoCatalog":
        merged = dict(self._templates)
        for template in extra:
            merged[template.key] = template
        return RepoCatalog(merged.values(), self._aliases)


DEFAULT_TEMPLATES = [
    RepoTemplate(
        key="aliyun",
        url_pattern="https://mirrors.aliyun.com/$distro/$releasever/AppStream/$basearch/os/",
        vault_url_pattern="https://mirrors.aliyun.com/$distro-vault/$releasever/AppStream/$basearch/os/",
        gpg_key_pattern="https://mirrors.aliyun.com/$distro/RPM-GPG-KEY-$distro-$releasever",
        priority=1,
    ),
    RepoTemplate(
        key="mysql57",
        url_pattern="https://repo.mysql.com/yum/mysql-5.7-community/el/$releasever/$basearch/",
        gpg_key_pattern="https://repo.mysql.com/RPM-GPG-KEY-mysql",
        priority=5,
        repo_type=TYPE_THIRD,
        family=FAMILY_DATABASE,
    ),
    RepoTemplate(
        key="mysql80",
        url_pattern="https://repo.mysql.com/yum/mysql-8.0-community/el/$releasever/$basearch/",
        gpg_key_pattern="https://repo.mysql.com/RPM-GPG-KEY-mysql-2023",
        priority=5,
        repo_type=TYPE_THIRD,
        family=FAMILY_DATABASE,
    ),
    RepoTemplate(
        key="redis",
        url_pattern="https://rpms.remirepo.net/enterprise/$releasever/redis/$basearch/",
        gpg_key_pattern="https://rpms.remirepo.net/RPM-GPG-KEY-remi",
        priority=5,
        repo_type=TYPE_THIRD,
    ),
    RepoTemplate(
        key="nginx",
        url_pattern="https://nginx.org/packages/centos/$releasever/$basearch/",
        gpg_key_pattern="https://nginx.org/keys/nginx_signing.key",
        priority=5,
        repo_type=TYPE_THIRD,
    ),
    RepoTemplate(
        key="docker",
        url_pattern="https://download.docker.com/linux/centos/$releasever/$basearch/stable",
        gpg_key_pattern="https://download.docker.com/linux/centos/gpg",
        priority=5,
        repo_type=TYPE_THIRD,
    ),
    RepoTemplate(
        key="k8s",
        url_pattern="https://packages.cloud.google.com/yum/repos/kubernetes-el7-$basearch",
        gpg_key_pattern="https://packages.cloud.google.com/yum/doc/yum-key.gpg",
        priority=5,
        repo_type=TYPE_THIRD,
    ),
    RepoTemplate(
        key="php7",
        url_pattern="https://rpms.remirepo.net/enterprise/$releasever/php74/$basearch/",
        gpg_key_pattern="https://rpms.remirepo.net/RPM-GPG-KEY-remi",
        priority=5,
        repo_type=TYPE_THIRD,
    ),
    RepoTemplate(
        key="php8",
        url_pattern="https://rpms.remirepo.net/enterprise/$releasever/php80/$basearch/",
        gpg_key_pattern="https://rpms.remirepo.net/RPM-GPG-KEY-remi",
        priority=5,
        repo_type=TYPE_THIRD,
    ),
    RepoTemplate(
        key="nodejs",
        url_pattern="https://rpm.nodesource.com/pub_16.x/el/$releasever/$basearch/",
        gpg_key_pattern="https://rpm.nodesource.com/pub/el/NODESOURCE-GPG-SIGNING-KEY-EL",
        priority=5,
        repo_type=TYPE_THIRD,
    ),
]

DEFAULT_ALIASES = {
    "kubernetes": "k8s",
    "mysql8": "mysql80",
}

DEFAULT_CATALOG = RepoCatalog(DEFAULT_TEMPLATES, DEFAULT_ALIASES)
