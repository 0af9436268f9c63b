"""Git interface layer — adapter, diff parsing, content units."""

from leakscan.git.adapter import (
    CommitLogStream,
    GitError,
    clone_repo,
    get_commit,
    get_commit_patch,
    get_repo_root,
)
from leakscan.git.diff_parser import DiffParser, iter_file_units
from leakscan.git.models import CommitInfo, ContentUnit, DiffFile, DiffLine, FileSkipped

__all__ = [
    "CommitInfo",
    "CommitLogStream",
    "ContentUnit",
    "DiffFile",
    "DiffLine",
    "DiffParser",
    "FileSkipped",
    "GitError",
    "clone_repo",
    "get_commit",
    "get_commit_patch",
    "get_repo_root",
]
