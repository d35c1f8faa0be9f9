"""
Approximate pattern matching backed by edlib's implementation of Myers'
bit-vector algorithm. The pattern must be consumed in full while the match may
begin and end anywhere in the text ("HW" mode), which is the search used to
place short anchor probes on a reference.
"""

from typing import Optional

import edlib

from hivlocator.engine.structures.alignment import PatternMatch


def find_best_match(pattern: str, text: str, max_distance: int) -> Optional[PatternMatch]:
    """
    Returns the lowest edit-distance placement of the pattern in the text, or
    None when nothing lies within max_distance. Among equally good candidates
    the earliest end position wins.
    """
    if len(pattern) == 0:
        raise ValueError("Pattern must not be empty.")
    if max_distance < 0:
        raise ValueError("max_distance cannot be negative.")
    result = edlib.align(pattern, text, mode="HW", task="locations", k=max_distance)
    if result["editDistance"] < 0 or not result["locations"]:
        return None
    # edlib reports locations in order of their end position, ends inclusive
    start, end = result["locations"][0]
    return PatternMatch(
        ref_start=start,
        ref_end=end + 1,
        edit_distance=result["editDistance"]
    )
