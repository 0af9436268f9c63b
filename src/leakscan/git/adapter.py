"""Git subprocess wrapper — clone, history patches, single commits."""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from leakscan.git.models import CommitInfo

_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x00"
# hash, author, email, author date, subject
_COMMIT_FORMAT = "%H%x00%an%x00%ae%x00%aI%x00%s"


class GitError(Exception):
    """Raised when git is unavailable or returns an unexpected error."""


def _run_git(args: List[str], cwd: Optional[Path] = None, timeout: int = 300) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {args[0]}")

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise GitError(f"git {args[0]} failed: {stderr or f'exit {result.returncode}'}")
    return result.stdout


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Return the root of the git repository containing *cwd*."""
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd or Path.cwd(), timeout=30)
    return Path(out.strip())


def clone_repo(url: str, dest: Path, depth: int = 0) -> Path:
    """Clone *url* into *dest* without a checkout; only history is read."""
    args = ["clone", "--quiet", "--no-checkout"]
    if depth > 0:
        args += ["--depth", str(depth)]
    args += [url, str(dest)]
    _run_git(args)
    return dest


def _parse_header(header: str) -> CommitInfo:
    parts = header.split(_FIELD_SEP)
    parts += [""] * (5 - len(parts))
    return CommitInfo(
        hash=parts[0].strip(),
        author=parts[1],
        email=parts[2],
        date=parts[3],
        message=parts[4],
    )


class CommitLogStream:
    """Stream ``(commit, patch_text)`` pairs from ``git log -p`` one commit at a time.

    The log is read from the pipe as git writes it, so memory stays bounded by
    the largest single commit and there is no overall timeout. ``close()``
    stops git and may be called from another thread than the one iterating.
    """

    def __init__(self, repo_path: Path, rev_range: Optional[str] = None) -> None:
        args = [
            "git",
            "log",
            "-p",
            "--unified=0",
            "--no-color",
            "--no-ext-diff",
            f"--format=%x1e{_COMMIT_FORMAT}",
        ]
        if rev_range:
            args.append(rev_range)
        self._stderr = tempfile.TemporaryFile()
        self._closed = False
        try:
            self._proc = subprocess.Popen(
                args,
                cwd=repo_path,
                stdout=subprocess.PIPE,
                stderr=self._stderr,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError:
            self._stderr.close()
            raise GitError("git is not installed or not on PATH")

    def __enter__(self) -> "CommitLogStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __iter__(self) -> Iterator[Tuple[CommitInfo, str]]:
        assert self._proc.stdout is not None
        record: List[str] = []
        for line in self._proc.stdout:
            if line.startswith(_RECORD_SEP):
                if record:
                    yield _parse_record(record)
                record = [line[len(_RECORD_SEP):]]
            else:
                record.append(line)
        if self._closed:
            return
        returncode = self._proc.wait()
        if returncode != 0:
            self._stderr.seek(0)
            stderr = self._stderr.read().decode("utf-8", "replace").strip()
            raise GitError(f"git log failed: {stderr or f'exit {returncode}'}")
        if record:
            yield _parse_record(record)

    def close(self) -> None:
        self._closed = True
        if self._proc.poll() is None:
            self._proc.kill()
        self._proc.wait()
        if self._proc.stdout is not None:
            self._proc.stdout.close()
        self._stderr.close()


def _parse_record(lines: List[str]) -> Tuple[CommitInfo, str]:
    header, _, patch = "".join(lines).partition("\n")
    return _parse_header(header), patch


def get_commit(repo_path: Path, sha: str) -> CommitInfo:
    """Resolve *sha* to its metadata. Raises GitError if it does not exist."""
    out = _run_git(
        ["show", "-s", "--no-color", f"--format={_COMMIT_FORMAT}", f"{sha}^{{commit}}"],
        cwd=repo_path,
        timeout=30,
    )
    return _parse_header(out.rstrip("\n"))


def get_commit_patch(repo_path: Path, sha: str) -> str:
    """Return the patch introduced by *sha* (no commit header)."""
    return _run_git(
        ["show", "--unified=0", "--no-color", "--no-ext-diff", "--format=", sha],
        cwd=repo_path,
    )
