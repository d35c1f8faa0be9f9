import pytest

from hivlocator.engine.analysis.myers import find_best_match
from hivlocator.engine.structures.alignment import PatternMatch


def naive_end_distances(pattern: str, text: str) -> list[int]:
    previous = list(range(len(pattern) + 1))
    ends = []
    for residue in text:
        current = [0]
        for i in range(1, len(pattern) + 1):
            current.append(min(
                previous[i - 1] + (pattern[i - 1] != residue),
                previous[i] + 1,
                current[i - 1] + 1
            ))
        ends.append(current[-1])
        previous = current
    return ends

def test_exact_match_is_found():
    assert find_best_match("ACGTTGCA", "TTTTACGTTGCATTTT", 0) == PatternMatch(4, 12, 0)

def test_single_substitution_is_found():
    assert find_best_match("ACGTTGCA", "GGGGACCTTGCAGGGG", 1) == PatternMatch(4, 12, 1)

def test_deletion_in_text_is_found():
    assert find_best_match("ACGTACGT", "TTACGACGTTT", 1) == PatternMatch(2, 9, 1)

def test_no_match_within_distance_returns_none():
    assert find_best_match("AAAA", "CCCCCCCC", 1) is None

def test_ties_resolve_to_earliest_end():
    assert find_best_match("ACGT", "ACGTTTACGT", 0) == PatternMatch(0, 4, 0)

def test_lower_distance_wins_over_earlier_end():
    best = find_best_match("ACGTACGT", "ACGAACGTTTTTACGTACGT", 2)
    assert best == PatternMatch(12, 20, 0)

def test_empty_pattern_is_rejected():
    with pytest.raises(ValueError):
        find_best_match("", "ACGT", 1)

def test_negative_distance_is_rejected():
    with pytest.raises(ValueError):
        find_best_match("ACGT", "ACGT", -1)

@pytest.mark.parametrize("seed", ["a", "b", "c"])
def test_best_match_agrees_with_dynamic_programming(seed, sequence_factory):
    pattern = sequence_factory(40, seed + "-pattern")
    text = sequence_factory(200, seed + "-text")
    distances = naive_end_distances(pattern, text)
    best_distance = min(distances)
    best = find_best_match(pattern, text, 40)
    assert best.edit_distance == best_distance
    assert best.ref_end == distances.index(best_distance) + 1

def test_probe_is_placed_on_long_text(synthetic_reference):
    probe = synthetic_reference[1200:1300]
    mutated = probe[:50] + ("A" if probe[50] != "A" else "C") + probe[51:]
    best = find_best_match(mutated, synthetic_reference, 30)
    assert best == PatternMatch(1200, 1300, 1)

def test_unrelated_probe_is_not_placed(synthetic_reference):
    assert find_best_match("N" * 100, synthetic_reference, 30) is None
