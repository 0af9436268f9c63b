"""Scan orchestration — paged repository fan-out, single-commit scans, aggregation.

Repositories are pulled from a ``RepositoryListing`` one page at a time and
handed to a fixed pool of ``max_concurrency`` workers through a bounded
queue, so listing pages are only requested as fast as repositories are
scanned. Every content unit goes through ``engine.check_unit``.

Failure policy:

* first listing page fails → ``ListingError`` (nothing to scan);
* later listing page fails → warning, already-listed repositories are scanned;
* one repository fails (clone, API) → warning, other repositories continue;
* commit lookup fails in single-commit mode → ``CommitNotFoundError``;
* one diff page fails → warning, the next page is tried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import AsyncIterator, Iterable, List, Optional

from leakscan.findings.aggregator import LeakAggregator
from leakscan.findings.models import ScanResult
from leakscan.git.diff_parser import iter_file_units
from leakscan.git.models import CommitInfo, ContentUnit
from leakscan.hosts.base import (
    CommitRef,
    ContentSource,
    DiffPage,
    DiffSource,
    RepositoryListing,
    RepositoryRef,
)
from leakscan.rules.registry import RuleSet
from leakscan.scanner.engine import ScanError, check_unit

logger = logging.getLogger(__name__)

_STOP = object()


class ListingError(Exception):
    """The first page of a repository listing could not be fetched."""


class CommitNotFoundError(Exception):
    """The commit of a single-commit scan could not be resolved."""


def _next_page(page: int, next_page: Optional[int]) -> int:
    return next_page if next_page is not None else page + 1


class ScanOrchestrator:
    """Drive one scan invocation over a shared, read-only ``RuleSet``."""

    def __init__(
        self,
        rule_set: RuleSet,
        *,
        max_concurrency: int = 4,
        max_page_failures: int = 3,
        aggregator: Optional[LeakAggregator] = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.rule_set = rule_set
        self.max_concurrency = max_concurrency
        self.max_page_failures = max(1, max_page_failures)
        self.aggregator = aggregator or LeakAggregator()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._cancelled = False
        self._units_scanned = 0
        self._repos_scanned = 0
        self._started = time.perf_counter()

    # ---- cancellation ----

    def cancel(self) -> None:
        """Stop issuing work; in-flight repositories stop at their next unit."""
        if not self._cancelled:
            logger.info("scan cancelled")
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    # ---- shared pipeline ----

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.aggregator.warn(message)

    async def _consume(self, units: AsyncIterator[ContentUnit]) -> None:
        try:
            async for unit in units:
                if self._cancelled:
                    break
                self.aggregator.extend(check_unit(unit, self.rule_set))
                self._units_scanned += 1
                # checkpoint: let other repositories make progress
                await asyncio.sleep(0)
        finally:
            aclose = getattr(units, "aclose", None)
            if aclose is not None:
                await aclose()

    def result(self) -> ScanResult:
        return ScanResult(
            leaks=list(self.aggregator.leaks),
            warnings=list(self.aggregator.warnings),
            units_scanned=self._units_scanned,
            repos_scanned=self._repos_scanned,
            scan_duration_ms=round((time.perf_counter() - self._started) * 1000, 2),
        )

    # ---- in-memory / working tree ----

    async def scan_units(self, units: Iterable[ContentUnit]) -> ScanResult:
        async def _aiter() -> AsyncIterator[ContentUnit]:
            for unit in units:
                yield unit

        await self._consume(_aiter())
        return self.result()

    # ---- repositories ----

    async def scan_repository(self, repo: RepositoryRef, source: ContentSource) -> bool:
        """Scan one repository. Returns False (and records a warning) on failure.

        Leaks found before a failure are kept.
        """
        logger.debug("scanning repository %s", repo.name)
        try:
            await self._consume(source.units(repo))
        except ScanError:
            raise
        except Exception as exc:
            self._warn(f"repository {repo.name}: {exc}")
            return False
        self._repos_scanned += 1
        logger.debug("finished repository %s", repo.name)
        return True

    async def iter_listing(self, listing: RepositoryListing) -> AsyncIterator[RepositoryRef]:
        """Yield repositories page by page until the host reports no more pages."""
        page = 1
        first = True
        while not self._cancelled:
            try:
                result = await listing.fetch_page(page)
            except Exception as exc:
                if first:
                    raise ListingError(f"failed to list repositories: {exc}") from exc
                self._warn(f"listing page {page}: {exc}; scanning repositories listed so far")
                return
            first = False
            logger.debug("listing page %d: %d repositories", page, len(result.items))
            for repo in result.items:
                yield repo
            if not result.has_more:
                return
            following = _next_page(page, result.next_page)
            if following <= page:
                logger.debug("listing page index did not advance past %d, stopping", page)
                return
            page = following

    async def scan_listing(
        self, listing: RepositoryListing, source: ContentSource
    ) -> ScanResult:
        """Scan every repository of a paged listing with a bounded worker pool."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_concurrency * 2)
        internal_errors: List[ScanError] = []

        async def _worker() -> None:
            while True:
                repo = await queue.get()
                try:
                    if repo is _STOP:
                        return
                    if not self._cancelled:
                        async with self._semaphore:
                            await self.scan_repository(repo, source)
                except ScanError as exc:
                    # keep draining the queue so the producer never blocks
                    internal_errors.append(exc)
                    self.cancel()
                finally:
                    queue.task_done()

        workers = [asyncio.create_task(_worker()) for _ in range(self.max_concurrency)]
        try:
            async for repo in self.iter_listing(listing):
                await queue.put(repo)
            for _ in workers:
                await queue.put(_STOP)
            await asyncio.gather(*workers)
        except BaseException:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise
        if internal_errors:
            raise internal_errors[0]
        return self.result()

    # ---- single commit ----

    async def _scan_diff_page(self, ref: CommitRef, commit: CommitInfo, diffs: DiffPage) -> None:
        async with self._semaphore:
            for diff_text, new_path in diffs.items:
                if self._cancelled:
                    return
                units = iter_file_units(
                    diff_text, commit=commit, repo=ref.repo, default_file=new_path
                )
                for unit in units:
                    self.aggregator.extend(check_unit(unit, self.rule_set))
                    self._units_scanned += 1
                await asyncio.sleep(0)

    async def scan_commit(self, ref: CommitRef, diff_source: DiffSource) -> ScanResult:
        """Scan the diffs of one commit, one task per diff page."""
        try:
            commit = await diff_source.get_commit(ref)
        except Exception as exc:
            raise CommitNotFoundError(f"failed to resolve commit {ref.sha} in {ref.repo}: {exc}") from exc
        logger.info("scanning commit %s in %s", commit.hash, ref.repo)

        tasks: List[asyncio.Task] = []
        page = 1
        failures = 0
        try:
            while not self._cancelled:
                try:
                    diffs = await diff_source.fetch_diff_page(ref, page)
                except Exception as exc:
                    failures += 1
                    self._warn(f"commit {ref.sha} diff page {page}: {exc}")
                    if failures >= self.max_page_failures:
                        self._warn(f"commit {ref.sha}: giving up after {failures} failed diff pages")
                        break
                    page += 1
                    continue
                failures = 0
                tasks.append(asyncio.create_task(self._scan_diff_page(ref, commit, diffs)))
                if not diffs.has_more:
                    break
                following = _next_page(page, diffs.next_page)
                if following <= page:
                    break
                page = following
            await asyncio.gather(*tasks)
        except BaseException:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        self._repos_scanned = 1
        return self.result()
