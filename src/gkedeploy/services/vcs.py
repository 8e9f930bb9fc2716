"""Git metadata lookups for gkedeploy."""

import subprocess
from typing import List, Optional, Tuple

from gkedeploy.errors import VcsError
from gkedeploy.errors_catalog import actionable_error


class VcsService:
    """Resolves the short commit hash and branch name of the working tree."""

    def __init__(self, logger, cwd: Optional[str] = None, subprocess_module=subprocess):
        self.logger = logger
        self.cwd = cwd
        self.subprocess = subprocess_module

    def current_commit(self) -> str:
        return self._git(["rev-parse", "--short", "HEAD"], "commit hash")

    def current_branch(self) -> str:
        return self._git(["symbolic-ref", "--short", "HEAD"], "branch name")

    def resolve(self) -> Tuple[str, str]:
        commit = self.current_commit()
        branch = self.current_branch()
        self.logger.debug("Resolved git commit %s on branch %s", commit, branch)
        return commit, branch

    def _git(self, args: List[str], what: str) -> str:
        cmd = ["git"] + args
        self.logger.debug("Executing: %s", " ".join(cmd))

        try:
            result = self.subprocess.run(
                cmd,
                cwd=self.cwd,
                text=True,
                capture_output=True,
            )
        except OSError as exc:
            raise VcsError(
                actionable_error("vcs_unavailable", what_value=what, reason=exc.strerror or str(exc))
            ) from exc

        output = (result.stdout or "").strip()
        if result.returncode != 0 or not output:
            reason = (result.stderr or "").strip() or f"git exited with {result.returncode}"
            raise VcsError(actionable_error("vcs_unavailable", what_value=what, reason=reason))

        return output
