import asyncio
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import AbstractContextManager
import dataclasses
import logging
from queue import Queue
from typing import Any, Optional, Sequence, Set, Tuple, Union

from hivlocator.engine.analysis.aligners import SemiglobalAligner
from hivlocator.engine.analysis.myers import find_best_match
from hivlocator.engine.settings import ALGORITHM_DIRECT, LocatorSettings
from hivlocator.engine.structures.alignment import AlignmentOperation, AlignmentPath, AlignmentStats, LocatedAlignment

logger = logging.getLogger(__name__)

GAP = "-"


def interpret_path(path: AlignmentPath, query: str, reference: str) -> Tuple[str, str, AlignmentStats]:
    """
    Walks an alignment path and renders the gap-padded query and reference
    strings alongside the match/mismatch/gap tallies.

    Returns:
        (query_aligned, ref_aligned, stats)
    """
    query_aligned: list[str] = []
    ref_aligned: list[str] = []
    matches = mismatches = gaps = 0
    for query_pos, ref_pos, operation in path.steps:
        if operation is AlignmentOperation.MATCH:
            query_aligned.append(query[query_pos - 1])
            ref_aligned.append(reference[ref_pos - 1])
            matches += 1
        elif operation is AlignmentOperation.SUBST:
            query_aligned.append(query[query_pos - 1])
            ref_aligned.append(reference[ref_pos - 1])
            mismatches += 1
        elif operation is AlignmentOperation.INS:
            query_aligned.append(query[query_pos - 1])
            ref_aligned.append(GAP)
            gaps += 1
        elif operation is AlignmentOperation.DEL:
            query_aligned.append(GAP)
            ref_aligned.append(reference[ref_pos - 1])
            gaps += 1

    columns = matches + mismatches + gaps
    percent_identity = matches / columns * 100 if columns else 0.0
    stats = AlignmentStats(
        percent_identity=percent_identity,
        matches=matches,
        mismatches=mismatches,
        gaps=gaps
    )
    return "".join(query_aligned), "".join(ref_aligned), stats


def direct_locate(query: str, reference: str, aligner: SemiglobalAligner) -> Optional[LocatedAlignment]:
    path = aligner.align(query, reference)
    if not path.steps:
        logger.warning("Semi-global alignment of a %d residue query produced an empty path.", len(query))
        return None
    query_aligned, ref_aligned, stats = interpret_path(path, query, reference)
    return LocatedAlignment(
        ref_start=path.ref_start + 1,
        ref_end=path.ref_end,
        percent_identity=stats.percent_identity,
        has_indel=stats.gaps > 0,
        query_aligned=query_aligned,
        ref_aligned=ref_aligned
    )


def windowed_locate(query: str, reference: str, settings: LocatorSettings, aligner: SemiglobalAligner) -> Optional[LocatedAlignment]:
    """
    Places the first and last probe_length residues of the query on the
    reference with the approximate matcher and only aligns the full query
    against the reference slice they span. Falls back to aligning against the
    whole reference when either probe cannot be placed, or when the probes
    land out of order.
    """
    head_probe = query[:settings.probe_length]
    tail_probe = query[-settings.probe_length:]

    head_match = find_best_match(head_probe, reference, settings.max_edit_distance)
    if head_match is None:
        logger.debug("Leading probe not found within %d edits, aligning against full reference.", settings.max_edit_distance)
        return direct_locate(query, reference, aligner)
    tail_match = find_best_match(tail_probe, reference, settings.max_edit_distance)
    if tail_match is None:
        logger.debug("Trailing probe not found within %d edits, aligning against full reference.", settings.max_edit_distance)
        return direct_locate(query, reference, aligner)

    window_start = head_match.ref_start
    window_end = tail_match.ref_end
    if window_start >= window_end:
        logger.debug("Probes placed out of order (%d >= %d), aligning against full reference.", window_start, window_end)
        return direct_locate(query, reference, aligner)

    logger.debug("Refined window [%d, %d) on reference.", window_start, window_end)
    located = direct_locate(query, reference[window_start:window_end], aligner)
    if located is None:
        return None
    return dataclasses.replace(
        located,
        ref_start=located.ref_start + window_start,
        ref_end=located.ref_end + window_start
    )


def locate(query: str, reference: str, settings: LocatorSettings = LocatorSettings(), aligner: Union[SemiglobalAligner, None] = None) -> Optional[LocatedAlignment]:
    """
    Locates a single validated query on the reference.

    Algorithm 1, and any query shorter than the window threshold, aligns the
    query against the whole reference. Algorithm 2 narrows the reference with
    anchor probes first; it is faster on long queries but may place the query
    differently when a probe's best match is not where the full alignment lies.
    """
    if aligner is None:
        aligner = SemiglobalAligner(settings.scoring)
    if settings.algorithm == ALGORITHM_DIRECT or len(query) < settings.window_threshold:
        return direct_locate(query, reference, aligner)
    return windowed_locate(query, reference, settings, aligner)


class AsyncLocatorEngine(AbstractContextManager):
    def __enter__(self):
        self._thread_pool = ThreadPoolExecutor(self._max_threads, thread_name_prefix="async-locator")
        return self

    def __init__(self, reference: str, settings: LocatorSettings = LocatorSettings(), max_threads: int = 4):
        self._reference = reference
        self._settings = settings
        self._max_threads = max_threads
        self._aligner = SemiglobalAligner(settings.scoring)
        self._work_left: Set[Future] = set()
        self._work_complete: Queue[Future] = Queue()

    def locate(self, query: str, **associated_data):
        work = self._thread_pool.submit(self.work, query, **associated_data)
        self._work_left.add(work)
        work.add_done_callback(self._on_complete)

    def _on_complete(self, future: Future):
        self._work_complete.put(future)
        self._work_left.discard(future)

    def work(self, query: str, **associated_data):
        return locate(query, self._reference, self._settings, self._aligner), associated_data

    async def next_completed(self) -> Union[tuple[Optional[LocatedAlignment], dict[str, Any]], None]:
        if self._work_complete.empty() and not self._work_left:
            return None
        completed = await asyncio.to_thread(self._work_complete.get)
        return await asyncio.wrap_future(completed)

    async def locate_in_order(self, queries: Sequence[str]) -> list[Optional[LocatedAlignment]]:
        for index, query in enumerate(queries):
            self.locate(query, index=index)
        results: list[Optional[LocatedAlignment]] = [None] * len(queries)
        async for located, associated_data in self:
            results[associated_data["index"]] = located
        return results

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()

    def __aiter__(self):
        return self

    async def __anext__(self):
        result = await self.next_completed()
        if result is None:
            raise StopAsyncIteration
        return result

    def shutdown(self):
        self._thread_pool.shutdown(wait=True, cancel_futures=True)
