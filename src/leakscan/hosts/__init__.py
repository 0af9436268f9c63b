"""Repository hosts — collaborator interfaces and the local git variant."""

from leakscan.hosts.base import (
    CommitRef,
    ContentSource,
    DiffPage,
    DiffSource,
    ListingPage,
    RepositoryListing,
    RepositoryRef,
)
from leakscan.hosts.local import (
    GitHistorySource,
    LocalDiffSource,
    StaticListing,
    iter_worktree_units,
    repository_ref,
)

__all__ = [
    "CommitRef",
    "ContentSource",
    "DiffPage",
    "DiffSource",
    "GitHistorySource",
    "ListingPage",
    "LocalDiffSource",
    "RepositoryListing",
    "RepositoryRef",
    "StaticListing",
    "iter_worktree_units",
    "repository_ref",
]
