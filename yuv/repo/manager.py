#!/usr/bin/env python3

import os
import re
import shutil
import logging
from typing import List, Optional, Sequence

from ..errors import RepoFileError, TemplateNotFoundError
from ..system.detector import DistroIdentity
from ..system.policy import SupportPolicy
from .catalog import DEFAULT_CATALOG, RepoCatalog
from .resolver import SPLIT_COMPONENTS
from .strategies import (
    CuratedFileStrategy,
    GenericTemplateStrategy,
    RepoFile,
    ResolutionStrategy,
    select_strategy,
)

logger = logging.getLogger(__name__)

REPO_DIR = "/etc/yum.repos.d"
BACKUP_DIR = "/etc/yum.repos.d.bak"
REPO_SUFFIX = ".repo"

_ENABLED_LINE = re.compile(r"^([ \t]*enabled[ \t]*=[ \t]*)[01][ \t]*$", re.MULTILINE)


class RepoManager:
    def __init__(self,
                 repo_dir: str = REPO_DIR,
                 backup_dir: str = BACKUP_DIR,
                 catalog: RepoCatalog = DEFAULT_CATALOG,
                 policy: Optional[SupportPolicy] = None,
                 curated: Optional[CuratedFileStrategy] = None):
        self.repo_dir = repo_dir
        self.backup_dir = backup_dir
        self.catalog = catalog
        self.policy = policy or SupportPolicy()
        self.curated = curated or CuratedFileStrategy()

    def use_strategies(self) -> List[ResolutionStrategy]:
        return [self.curated, GenericTemplateStrategy(self.policy, split=True)]

    def add_strategies(self) -> List[ResolutionStrategy]:
        return [self.curated.without_use_only(), GenericTemplateStrategy(self.policy, split=False)]

    def build(self, name: str, identity: DistroIdentity,
              strategies: Sequence[ResolutionStrategy]) -> List[RepoFile]:
        template = self.catalog.get(name)
        strategy = select_strategy(strategies, template, identity)
        return strategy.build(template, identity)

    def use(self, name: str, identity: DistroIdentity) -> List[str]:
        """Replace every configured repository with the named mirror"""
        # Existing repo files stay in place until the new ones are built
        files = self.build(name, identity, self.use_strategies())

        self.backup()
        self._clean_repo_dir()
        return self._write_files(files)

    def add(self, name: str, identity: DistroIdentity) -> List[str]:
        files = self.build(name, identity, self.add_strategies())
        return self._write_files(files)

    def remove(self, name: str) -> List[str]:
        removed = []
        for path in self._existing_files(name):
            try:
                os.remove(path)
            except OSError as e:
                raise RepoFileError(f"Failed to remove {path}: {e}")
            logger.info(f"Removed {path}")
            removed.append(path)
        return removed

    def list(self) -> List[str]:
        return [filename[:-len(REPO_SUFFIX)] for filename in self._repo_files(self.repo_dir)]

    def enable(self, name: str) -> List[str]:
        return self._set_enabled(name, True)

    def disable(self, name: str) -> List[str]:
        return self._set_enabled(name, False)

    def backup(self) -> List[str]:
        """Move all repo files into the backup directory"""
        try:
            os.makedirs(self.backup_dir, mode=0o755, exist_ok=True)
        except OSError as e:
            raise RepoFileError(f"Failed to create backup directory {self.backup_dir}: {e}")

        moved = []
        for filename in self._repo_files(self.repo_dir):
            src = os.path.join(self.repo_dir, filename)
            dst = os.path.join(self.backup_dir, filename)
            try:
                if os.path.exists(dst):
                    os.remove(dst)
                shutil.move(src, dst)
            except OSError as e:
                raise RepoFileError(f"Failed to back up {src}: {e}")
            moved.append(dst)

        logger.info(f"Backed up {len(moved)} repo files to {self.backup_dir}")
        return moved

    def restore(self) -> List[str]:
        if not os.path.isdir(self.backup_dir):
            raise RepoFileError(f"Backup directory not found: {self.backup_dir}")

        restored = []
        for filename in self._repo_files(self.backup_dir):
            src = os.path.join(self.backup_dir, filename)
            dst = os.path.join(self.repo_dir, filename)
            try:
                shutil.copy2(src, dst)
            except OSError as e:
                raise RepoFileError(f"Failed to restore {src}: {e}")
            restored.append(dst)

        logger.info(f"Restored {len(restored)} repo files from {self.backup_dir}")
        return restored

    def _candidate_files(self, name: str) -> List[str]:
        """File names add or use may have written for the repository"""
        bases = [name]
        curated: List[str] = []
        try:
            key = self.catalog.get(name).key
        except TemplateNotFoundError:
            key = None
        if key is not None:
            if key != name:
                bases.append(key)
            curated = self.curated.filenames(key)

        candidates: List[str] = []
        for base in bases:
            candidates.append(f"{base}{REPO_SUFFIX}")
            candidates.extend(f"{base}-{component.lower()}{REPO_SUFFIX}" for component in SPLIT_COMPONENTS)
        candidates.extend(curated)

        unique: List[str] = []
        for filename in candidates:
            if filename not in unique:
                unique.append(filename)
        return unique

    def _existing_files(self, name: str) -> List[str]:
        paths = [os.path.join(self.repo_dir, filename) for filename in self._candidate_files(name)]
        existing = [path for path in paths if os.path.isfile(path)]
        if not existing:
            raise RepoFileError(f"repo {name} not found in {self.repo_dir}")
        return existing

    def _repo_files(self, directory: str) -> List[str]:
        try:
            entries = os.listdir(directory)
        except OSError as e:
            raise RepoFileError(f"Failed to read {directory}: {e}")

        return sorted(
            entry for entry in entries
            if entry.endswith(REPO_SUFFIX) and os.path.isfile(os.path.join(directory, entry))
        )

    def _clean_repo_dir(self) -> None:
        for filename in self._repo_files(self.repo_dir):
            path = os.path.join(self.repo_dir, filename)
            try:
                os.remove(path)
            except OSError as e:
                raise RepoFileError(f"Failed to remove {path}: {e}")

    def _write_files(self, files: Sequence[RepoFile]) -> List[str]:
        try:
            os.makedirs(self.repo_dir, mode=0o755, exist_ok=True)
        except OSError as e:
            raise RepoFileError(f"Failed to create repo directory {self.repo_dir}: {e}")

        written = []
        for repo_file in files:
            path = os.path.join(self.repo_dir, repo_file.filename)
            try:
                with open(path, "w") as f:
                    f.write(repo_file.content)
                os.chmod(path, 0o644)
            except OSError as e:
                raise RepoFileError(f"Failed to write {path}: {e}")
            logger.info(f"Wrote {path}")
            written.append(path)
        return written

    def _set_enabled(self, name: str, enabled: bool) -> List[str]:
        value = "1" if enabled else "0"
        paths = self._existing_files(name)

        for path in paths:
            try:
                with open(path, "r") as f:
                    content = f.read()
            except OSError as e:
                raise RepoFileError(f"Failed to read repo file {path}: {e}")

            content = _ENABLED_LINE.sub(lambda m: f"{m.group(1)}{value}", content)

            try:
                with open(path, "w") as f:
                    f.write(content)
            except OSError as e:
                raise RepoFileError(f"Failed to write repo file {path}: {e}")

        logger.info(f"{'Enabled' if enabled else 'Disabled'} {name} ({len(paths)} files)")
        return paths
