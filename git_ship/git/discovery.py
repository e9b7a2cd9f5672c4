"""Git repository discovery.

Locates the repository the user is standing in and works out which branch
plays the role of trunk. Uses GitPython so discovery works before any
subprocess-based adapter exists.

Trunk detection order:
    1. The branch ``origin/HEAD`` points at
    2. A local ``main`` branch
    3. A local ``master`` branch
    4. ``main``

Example:
    >>> discovery = GitDiscovery()
    >>> discovery.root
    PosixPath('/home/me/project')
    >>> discovery.detect_trunk()
    'main'

Dependencies:
    Requires GitPython (gitpython) package for repository access.
"""

from pathlib import Path

import git
import structlog
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from git_ship.exceptions import NotGitRepositoryError

log = structlog.get_logger(__name__)

DEFAULT_TRUNK = "main"
FALLBACK_TRUNKS = ("main", "master")


class GitDiscovery:
    """Discovers repository location and trunk branch.

    The ``git.Repo`` object is created lazily, so constructing a discovery
    object never fails; the first property access does.

    Attributes:
        repo_path: Resolved path the search starts from
    """

    def __init__(self, repo_path: str | Path = ".") -> None:
        """Initialize discovery for a path.

        Args:
            repo_path: Any path inside the repository. Parent directories
                are searched automatically.
        """
        self.repo_path = Path(repo_path).resolve()
        self._repo: git.Repo | None = None

    def _get_repo(self) -> git.Repo:
        """Get the repository object, opening it on first use.

        Raises:
            NotGitRepositoryError: If the path is not within a git repository.
        """
        if self._repo is None:
            try:
                self._repo = git.Repo(self.repo_path, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise NotGitRepositoryError(str(self.repo_path)) from e
        return self._repo

    @property
    def root(self) -> Path:
        """Top-level directory of the working tree."""
        working_tree = self._get_repo().working_tree_dir
        if working_tree is None:
            raise NotGitRepositoryError(str(self.repo_path))
        return Path(working_tree)

    def detect_trunk(self) -> str:
        """Name of the branch pull requests should target.

        Returns:
            Trunk branch name, never empty
        """
        repo = self._get_repo()

        try:
            ref = repo.git.symbolic_ref("refs/remotes/origin/HEAD").strip()
        except GitCommandError:
            ref = ""
        prefix = "refs/remotes/origin/"
        if ref.startswith(prefix) and len(ref) > len(prefix):
            trunk = ref[len(prefix) :]
            log.debug("trunk_detected", trunk=trunk, source="origin_head")
            return trunk

        local_heads = {head.name for head in repo.heads}
        for candidate in FALLBACK_TRUNKS:
            if candidate in local_heads:
                log.debug("trunk_detected", trunk=candidate, source="local_branch")
                return candidate

        log.debug("trunk_detected", trunk=DEFAULT_TRUNK, source="default")
        return DEFAULT_TRUNK
