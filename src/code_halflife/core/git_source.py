"""Git diff source built on pydriller.

Reads the history of a single branch oldest first, diffs every commit against
its first parent and reads the first commit as a full tree snapshot.
"""

from collections.abc import Sequence
import logging
from pathlib import Path

from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from pydriller import Git, Repository
from tqdm import tqdm

from code_halflife.core.diff_source import (
    CommitInfo,
    DiffSource,
    FileDiff,
    FileEntry,
    parse_unified_diff,
)
from code_halflife.error.exceptions import (
    BranchNotFoundError,
    DiffUnavailableError,
    RepositoryError,
)

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATE_BRANCHES = ("main", "master")

_READ_ERRORS = (GitCommandError, ValueError, OSError)


class GitDiffSource(DiffSource):
    """Diff source reading a local git repository.

    Commits keep pydriller's traversal order (parents before children) and
    are stamped with the committer date, clamped so it never decreases along
    that order. Merge commits contribute no diff.
    """

    def __init__(
        self,
        repo_path: Path,
        branch: str | None = None,
        candidate_branches: Sequence[str] = DEFAULT_CANDIDATE_BRANCHES,
        show_progress: bool = True,
    ) -> None:
        """Open the repository and resolve the branch to analyze.

        Args:
            repo_path: Path to the git working tree
            branch: Branch to follow; if None the first existing candidate is used
            candidate_branches: Branch names tried in order when branch is None
            show_progress: Show a tqdm progress bar while reading history

        Raises:
            RepositoryError: If the path is not a git repository
            BranchNotFoundError: If no branch can be resolved
        """
        self.repo_path = Path(repo_path)
        self.show_progress = show_progress

        if not self.repo_path.exists():
            raise RepositoryError(f"repository path does not exist: {repo_path}")

        try:
            self._git = Git(str(self.repo_path))
            heads = [head.name for head in self._git.repo.heads]
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryError(f"not a git repository: {repo_path}") from e

        self.branch = self._resolve_branch(heads, branch, candidate_branches)
        logger.info("Analyzing branch %s of %s", self.branch, self.repo_path)

    @staticmethod
    def _resolve_branch(
        heads: list[str], branch: str | None, candidate_branches: Sequence[str]
    ) -> str:
        candidates = [branch] if branch else list(candidate_branches)
        for name in candidates:
            if name in heads:
                return name
        raise BranchNotFoundError(
            f"could not find any of the branches {', '.join(candidates)} "
            f"(available: {', '.join(sorted(heads)) or 'none'})"
        )

    def chronological_commits(self) -> list[CommitInfo]:
        repository = Repository(str(self.repo_path), only_in_branch=self.branch)
        commits: list[CommitInfo] = []
        latest = None
        for commit in tqdm(
            repository.traverse_commits(),
            desc="Reading history",
            disable=not self.show_progress,
        ):
            # Parents come before children; a skewed clock must not reorder them
            timestamp = commit.committer_date
            if latest is not None and timestamp < latest:
                logger.debug(
                    "Commit %s dated before its predecessor, using %s",
                    commit.hash[:7],
                    latest.isoformat(),
                )
                timestamp = latest
            latest = timestamp

            message = commit.msg.splitlines()[0] if commit.msg else ""
            commits.append(CommitInfo(commit.hash, timestamp, message))

        logger.info("Found %d commits on %s", len(commits), self.branch)
        return commits

    def diff_against_parent(self, commit: CommitInfo) -> list[FileDiff]:
        try:
            modified_files = self._git.get_commit(commit.commit_id).modified_files
            diffs = []
            for modified_file in modified_files:
                path = modified_file.new_path or modified_file.old_path
                if path is None:
                    continue
                chunks = parse_unified_diff(modified_file.diff or "")
                diffs.append(FileDiff(path=path, chunks=chunks))
        except _READ_ERRORS as e:
            raise DiffUnavailableError(commit.commit_id, f"cannot read patch: {e}") from e
        return diffs

    def full_tree_snapshot(self, commit: CommitInfo) -> list[FileEntry]:
        try:
            tree = self._git.repo.commit(commit.commit_id).tree
            entries = []
            for item in tree.traverse():
                if item.type != "blob":
                    continue
                data = item.data_stream.read()
                if b"\0" in data:
                    logger.debug("Skipping binary file %s", item.path)
                    continue
                entries.append(FileEntry(item.path, data.decode("utf-8", errors="replace")))
        except _READ_ERRORS as e:
            raise DiffUnavailableError(commit.commit_id, f"cannot read tree: {e}") from e
        return entries
