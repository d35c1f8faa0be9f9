from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class AlignmentOperation(Enum):
    MATCH = "match"
    SUBST = "subst"
    INS = "ins" # query residue with no reference counterpart
    DEL = "del" # reference residue with no query counterpart

# (query_pos, ref_pos, operation), positions are 1-based
PathStep = tuple[int, int, AlignmentOperation]

@dataclass(frozen=True)
class AlignmentPath:
    steps: Sequence[PathStep]
    ref_start: int # 0-based
    ref_end: int # exclusive

@dataclass(frozen=True)
class PatternMatch:
    ref_start: int
    ref_end: int
    edit_distance: int

@dataclass(frozen=True)
class AlignmentStats:
    percent_identity: float
    matches: int
    mismatches: int
    gaps: int

@dataclass(frozen=True)
class LocatedAlignment:
    ref_start: int # 1-based, inclusive
    ref_end: int # inclusive
    percent_identity: float
    has_indel: bool
    query_aligned: str
    ref_aligned: str
