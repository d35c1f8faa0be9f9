from io import TextIOBase
import sys
from typing import Iterable, Union

from hivlocator.engine.structures.alignment import LocatedAlignment


def format_located_alignment(located: LocatedAlignment) -> str:
    return "\t".join((
        str(located.ref_start),
        str(located.ref_end),
        repr(float(located.percent_identity)),
        "true" if located.has_indel else "false",
        located.query_aligned,
        located.ref_aligned
    ))

def write_located_alignments(located_alignments: Iterable[LocatedAlignment], handle: Union[TextIOBase, None] = None) -> int:
    if handle is None:
        handle = sys.stdout
    written = 0
    for located in located_alignments:
        handle.write(format_located_alignment(located) + "\n")
        written += 1
    return written
