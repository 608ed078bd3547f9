#!/usr/bin/env python3

import os
import logging
import yaml
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional

from ..errors import ConfigError
from ..repo.catalog import DEFAULT_CATALOG, RepoCatalog, RepoTemplate, template_from_dict
from ..repo.manager import BACKUP_DIR, REPO_DIR
from ..system.policy import DEFAULT_SUPPORT_BASELINE, SupportPolicy

logger = logging.getLogger(__name__)

PACKAGE_MANAGERS = ("auto", "dnf", "yum")


@dataclass
class YuvConfig:
    repo_dir: str = REPO_DIR
    backup_dir: str = BACKUP_DIR
    log_level: str = "INFO"
    package_manager: str = "auto"
    # Oldest live major release per distro; older releases use vault mirrors
    support_baseline: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_SUPPORT_BASELINE))
    # key -> RepoTemplate fields, registered next to the built-in templates
    custom_repos: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if self.package_manager not in PACKAGE_MANAGERS:
            raise ConfigError(f"package_manager must be one of {', '.join(PACKAGE_MANAGERS)}")

        for distro, major in self.support_baseline.items():
            if not isinstance(major, int) or isinstance(major, bool) or major < 0:
                raise ConfigError(f"support_baseline for {distro} must be a non-negative integer")

    def custom_templates(self) -> List[RepoTemplate]:
        return [template_from_dict(key, data or {}) for key, data in self.custom_repos.items()]


class ConfigManager:
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._get_default_config_path()
        self._config: Optional[YuvConfig] = None

    def _get_default_config_path(self) -> str:
        xdg_config = os.environ.get('XDG_CONFIG_HOME', '~/.config')
        return os.path.expanduser(f"{xdg_config}/yuv/config.yaml")

    def load_config(self) -> YuvConfig:
        if self._config is not None:
            return self._config

        if not os.path.exists(self.config_path):
            self._config = YuvConfig()
            self.save_config()
            return self._config

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config from {self.config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Error loading config from {self.config_path}: expected a mapping")

        # Partial baselines extend the defaults instead of replacing them
        if 'support_baseline' in data:
            if not isinstance(data['support_baseline'], (dict, type(None))):
                raise ConfigError("support_baseline must be a mapping of distro to major version")
            baseline = dict(DEFAULT_SUPPORT_BASELINE)
            baseline.update(data['support_baseline'] or {})
            data['support_baseline'] = baseline

        try:
            self._config = YuvConfig(**data)
        except TypeError as e:
            raise ConfigError(f"Error loading config from {self.config_path}: {e}")

        logger.debug(f"Loaded config from {self.config_path}")
        return self._config

    def save_config(self) -> None:
        if self._config is None:
            raise ConfigError("No config loaded to save")

        try:
            os.makedirs(os.path.dirname(self.config_path), exist_ok=True)
            with open(self.config_path, 'w') as f:
                f.write("# yuv configuration\n")
                yaml.dump(asdict(self._config), f, default_flow_style=False, indent=2)
        except OSError as e:
            # Read-only home directories still get the defaults
            logger.warning(f"Could not write config to {self.config_path}: {e}")

    def get_config(self) -> YuvConfig:
        if self._config is None:
            return self.load_config()
        return self._config

    def get_policy(self) -> SupportPolicy:
        return SupportPolicy(self.get_config().support_baseline)

    def get_catalog(self) -> RepoCatalog:
        custom = self.get_config().custom_templates()
        if not custom:
            return DEFAULT_CATALOG
        return DEFAULT_CATALOG.with_templates(custom)
