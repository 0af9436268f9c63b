"""Local git host — repositories given as paths or clone URLs, read with the git CLI.

Blocking git calls run in worker threads (``asyncio.to_thread``) so one slow
clone does not stall the other repositories.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import AsyncIterator, Dict, Iterator, List, Optional, Sequence, Tuple

from leakscan.git.adapter import CommitLogStream, clone_repo, get_commit, get_commit_patch
from leakscan.git.diff_parser import iter_file_units, split_patch
from leakscan.git.models import CommitInfo, ContentUnit
from leakscan.hosts.base import CommitRef, DiffPage, ListingPage, RepositoryRef

logger = logging.getLogger(__name__)

_BINARY_SAMPLE_SIZE = 8192
_SKIP_DIRS = {".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv", "venv"}


def repository_ref(source: str) -> RepositoryRef:
    """Build a RepositoryRef from a local path or clone URL."""
    name = source.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return RepositoryRef(name=name or source, url=source)


class StaticListing:
    """Pages over a fixed list of repositories, ``per_page`` at a time."""

    def __init__(self, repos: Sequence[RepositoryRef], per_page: int = 100) -> None:
        if per_page < 1:
            raise ValueError("per_page must be at least 1")
        self._repos = list(repos)
        self._per_page = per_page

    async def fetch_page(self, page: int) -> ListingPage:
        start = (page - 1) * self._per_page
        end = start + self._per_page
        return ListingPage(
            items=self._repos[start:end],
            has_more=end < len(self._repos),
            next_page=page + 1,
        )


class GitHistorySource:
    """Content units for every file touched by every commit of a repository.

    Remote URLs are cloned into a temporary directory that is removed when
    the repository has been scanned; local paths are read in place.
    """

    def __init__(self, clone_depth: int = 0, rev_range: Optional[str] = None) -> None:
        self.clone_depth = clone_depth
        self.rev_range = rev_range

    def _open(self, repo: RepositoryRef) -> Tuple[Path, Optional[tempfile.TemporaryDirectory]]:
        local = Path(repo.url).expanduser()
        if local.is_dir():
            return local, None
        tmp = tempfile.TemporaryDirectory(prefix="leakscan-")
        try:
            logger.debug("cloning %s", repo.name)
            clone_repo(repo.url, Path(tmp.name) / repo.name, depth=self.clone_depth)
        except BaseException:
            tmp.cleanup()
            raise
        return Path(tmp.name) / repo.name, tmp

    async def units(self, repo: RepositoryRef) -> AsyncIterator[ContentUnit]:
        path, tmp = await asyncio.to_thread(self._open, repo)
        stream: Optional[CommitLogStream] = None
        try:
            stream = await asyncio.to_thread(CommitLogStream, path, self.rev_range)
            commits = iter(stream)
            count = 0
            while True:
                # one commit per thread hop; the consumer checks for cancel between units
                item = await asyncio.to_thread(next, commits, None)
                if item is None:
                    break
                commit, patch = item
                count += 1
                for unit in iter_file_units(patch, commit=commit, repo=repo.name):
                    yield unit
            logger.debug("%s: %d commits", repo.name, count)
        finally:
            if stream is not None:
                stream.close()
            if tmp is not None:
                tmp.cleanup()


class LocalDiffSource:
    """Single-commit diffs from a local repository, ``per_page`` files per page."""

    def __init__(self, repo_path: Path, per_page: int = 100) -> None:
        self.repo_path = repo_path
        self.per_page = per_page
        self._pairs: Dict[str, List[Tuple[str, str]]] = {}

    async def get_commit(self, ref: CommitRef) -> CommitInfo:
        return await asyncio.to_thread(get_commit, self.repo_path, ref.sha)

    async def fetch_diff_page(self, ref: CommitRef, page: int) -> DiffPage:
        if ref.sha not in self._pairs:
            patch = await asyncio.to_thread(get_commit_patch, self.repo_path, ref.sha)
            self._pairs[ref.sha] = split_patch(patch)
        pairs = self._pairs[ref.sha]
        start = (page - 1) * self.per_page
        end = start + self.per_page
        return DiffPage(items=tuple(pairs[start:end]), has_more=end < len(pairs), next_page=page + 1)


def _is_binary(path: Path) -> bool:
    with open(path, "rb") as f:
        return b"\x00" in f.read(_BINARY_SAMPLE_SIZE)


def iter_worktree_units(
    root: Path, *, repo: str = "", max_file_size: int = 10 * 1024 * 1024
) -> Iterator[ContentUnit]:
    """Yield one unit per file under *root* (no commit metadata).

    Binary and oversized files yield an empty unit so path rules still apply.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)
        for filename in sorted(filenames):
            full = Path(dirpath) / filename
            rel = full.relative_to(root).as_posix()
            try:
                if full.is_symlink() or full.stat().st_size > max_file_size or _is_binary(full):
                    yield ContentUnit(text="", path=rel, repo=repo)
                    continue
                text = full.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.warning("skipping %s: %s", rel, exc)
                continue
            yield ContentUnit(text=text, path=rel, repo=repo)
