from dataclasses import dataclass, field

ALGORITHM_DIRECT = 1
ALGORITHM_WINDOWED = 2
ALGORITHMS = (ALGORITHM_DIRECT, ALGORITHM_WINDOWED)

@dataclass(frozen=True)
class ScoringScheme:
    match_score: int = 1
    mismatch_score: int = -1
    # a gap of length k costs gap_open + k * gap_extend
    gap_open: int = -5
    gap_extend: int = -1

@dataclass(frozen=True)
class LocatorSettings:
    algorithm: int = ALGORITHM_DIRECT
    window_threshold: int = 300
    probe_length: int = 100
    max_edit_distance: int = 30
    scoring: ScoringScheme = field(default_factory=ScoringScheme)

    def __post_init__(self):
        if self.algorithm not in ALGORITHMS:
            raise ValueError("Algorithm must be either 1 or 2")
        if self.probe_length < 1:
            raise ValueError("probe_length must be at least 1")
        if self.window_threshold < self.probe_length:
            raise ValueError("window_threshold must be >= probe_length")
        if self.max_edit_distance < 0:
            raise ValueError("max_edit_distance cannot be negative")
