from Bio.Align import PairwiseAligner
import numpy as np

from hivlocator.engine.exceptions.locator import AlignmentFailedException
from hivlocator.engine.settings import ScoringScheme
from hivlocator.engine.structures.alignment import AlignmentOperation, AlignmentPath, PathStep


def build_semiglobal_aligner(scoring: ScoringScheme) -> PairwiseAligner:
    aligner = PairwiseAligner()
    aligner.mode = "global"
    aligner.match_score = scoring.match_score
    aligner.mismatch_score = scoring.mismatch_score
    # Biopython charges open_gap_score for the first gapped position only
    aligner.open_gap_score = scoring.gap_open + scoring.gap_extend
    aligner.extend_gap_score = scoring.gap_extend
    # Reference overhang on either side is free, the query must be consumed in full.
    aligner.end_deletion_score = 0
    return aligner


def left_align_gaps(coordinates: np.ndarray, query: str, reference: str) -> np.ndarray:
    """
    Moves every internal gap to the leftmost position that pairs the same
    residues, so equally scoring gap placements are reported identically.
    Returns a new coordinates array (row 0 reference, row 1 query).
    """
    coordinates = np.array(coordinates, dtype=int)
    segments = coordinates.shape[1] - 1
    for segment in range(1, segments - 1):
        ref_step, query_step = (int(value) for value in coordinates[:, segment + 1] - coordinates[:, segment])
        if (ref_step == 0) == (query_step == 0):
            continue
        gapped, axis = (reference, 0) if query_step == 0 else (query, 1)
        while True:
            before = coordinates[:, segment] - coordinates[:, segment - 1]
            after = coordinates[:, segment + 2] - coordinates[:, segment + 1]
            if before.min() < 2 or after.min() < 1:
                break
            gap_start, gap_end = int(coordinates[axis, segment]), int(coordinates[axis, segment + 1])
            if gapped[gap_start - 1] != gapped[gap_end - 1]:
                break
            coordinates[:, segment:segment + 2] -= 1
    return coordinates


def path_from_coordinates(coordinates: np.ndarray, query: str, reference: str) -> AlignmentPath:
    """
    Converts Biopython alignment coordinates (row 0 reference, row 1 query)
    into a per-column path. Reference-only segments at either end are the free
    end gaps of the semi-global alignment and are clipped off the path.
    """
    deltas = np.diff(coordinates, axis=1)
    first, last = 0, deltas.shape[1]
    while first < last and deltas[1, first] == 0:
        first += 1
    while last > first and deltas[1, last - 1] == 0:
        last -= 1

    steps: list[PathStep] = []
    for segment in range(first, last):
        ref_offset, query_offset = (int(value) for value in coordinates[:, segment])
        ref_step, query_step = (int(value) for value in deltas[:, segment])
        if ref_step and query_step:
            for k in range(ref_step):
                operation = AlignmentOperation.MATCH if reference[ref_offset + k] == query[query_offset + k] else AlignmentOperation.SUBST
                steps.append((query_offset + k + 1, ref_offset + k + 1, operation))
        elif query_step:
            for k in range(query_step):
                steps.append((query_offset + k + 1, ref_offset, AlignmentOperation.INS))
        else:
            for k in range(ref_step):
                steps.append((query_offset, ref_offset + k + 1, AlignmentOperation.DEL))

    return AlignmentPath(
        steps=tuple(steps),
        ref_start=int(coordinates[0, first]),
        ref_end=int(coordinates[0, last])
    )


class SemiglobalAligner:
    def __init__(self, scoring: ScoringScheme = ScoringScheme()):
        self._aligner = build_semiglobal_aligner(scoring)

    def align(self, query: str, reference: str) -> AlignmentPath:
        alignments = self._aligner.align(reference, query)
        try:
            top_alignment = alignments[0]
        except IndexError:
            raise AlignmentFailedException(len(query), len(reference))
        coordinates = left_align_gaps(top_alignment.coordinates, query, reference)
        return path_from_coordinates(coordinates, query, reference)

    def score(self, query: str, reference: str) -> float:
        return self._aligner.score(reference, query)
