"""Collaborator interfaces between the scan orchestrator and repository hosts.

A host variant implements ``RepositoryListing`` (paged repository discovery),
``ContentSource`` (content units for one repository) and, for single-commit
scans, ``DiffSource``. Variants are picked by configuration; they share no
base class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, Optional, Protocol, Sequence, Tuple

from leakscan.git.models import CommitInfo, ContentUnit


@dataclass(frozen=True)
class RepositoryRef:
    name: str
    url: str = ""  # clone URL or local path


@dataclass(frozen=True)
class CommitRef:
    repo: str  # repository name, path or URL
    sha: str


@dataclass(frozen=True)
class ListingPage:
    """One page of a repository listing.

    ``next_page`` defaults to ``page + 1`` when the host does not say.
    """

    items: Sequence[RepositoryRef] = ()
    has_more: bool = False
    next_page: Optional[int] = None


@dataclass(frozen=True)
class DiffPage:
    """One page of a commit's diffs: ``(diff_text, new_path)`` pairs."""

    items: Sequence[Tuple[str, str]] = field(default_factory=tuple)
    has_more: bool = False
    next_page: Optional[int] = None


class RepositoryListing(Protocol):
    async def fetch_page(self, page: int) -> ListingPage: ...


class ContentSource(Protocol):
    def units(self, repo: RepositoryRef) -> AsyncIterator[ContentUnit]: ...


class DiffSource(Protocol):
    async def get_commit(self, ref: CommitRef) -> CommitInfo: ...

    async def fetch_diff_page(self, ref: CommitRef, page: int) -> DiffPage: ...
