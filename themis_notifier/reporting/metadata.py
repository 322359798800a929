"""Build metadata assembly.

Source-control details come from the build's environment variables:
Git (GIT_COMMIT + GIT_BRANCH) wins over Subversion (SVN_REVISION).
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from themis_notifier.reporting.types import BuildMetadata
from themis_notifier.reporting.workspace import Workspace

logger = logging.getLogger(__name__)

GIT_COMMIT = "GIT_COMMIT"
GIT_BRANCH = "GIT_BRANCH"
SVN_REVISION = "SVN_REVISION"


@dataclass
class BuildRun:
    """The running build as seen by the notifier."""

    start_time_millis: int
    environment: Callable[[], Mapping[str, str]] = field(default=lambda: dict(os.environ))

    @classmethod
    def now(cls) -> "BuildRun":
        return cls(start_time_millis=int(time.time() * 1000))


class MetadataBuilder:
    """Builds BuildMetadata, resolving the environment at most once."""

    def __init__(self, env_vars: Optional[Mapping[str, str]] = None):
        self._env_vars = dict(env_vars) if env_vars is not None else None

    @property
    def env_vars(self) -> Optional[Mapping[str, str]]:
        return self._env_vars

    def resolve_env(self, run: BuildRun) -> Mapping[str, str]:
        if self._env_vars is None:
            self._env_vars = dict(run.environment())
        return self._env_vars

    def build(self, run: BuildRun, workspace: Workspace) -> BuildMetadata:
        env = self.resolve_env(run)
        commit, branch = _scm_info(env)
        metadata = BuildMetadata(
            execution_timestamp_millis=run.start_time_millis,
            workspace_remote_path=workspace.remote_path,
            commit=commit,
            branch=branch,
        )
        logger.debug("Build metadata: %s", metadata.to_json())
        return metadata


def derive_for(base: BuildMetadata, category: str) -> BuildMetadata:
    """Per-category copy of `base` tagged with dataType=category."""
    return base.derive(category)


def _scm_info(env: Mapping[str, str]) -> tuple[Optional[str], Optional[str]]:
    git_commit = env.get(GIT_COMMIT)
    if git_commit is not None:
        return git_commit, env.get(GIT_BRANCH)
    svn_revision = env.get(SVN_REVISION)
    if svn_revision is not None:
        return svn_revision, None
    return None, None
