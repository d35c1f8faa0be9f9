import asyncio
from io import TextIOWrapper
from typing import Any, AsyncGenerator, Iterable, Union
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from hivlocator.engine.structures.genomics import NamedString


async def read_fasta(handle: Union[str, TextIOWrapper]) -> AsyncGenerator[NamedString, Any]:
    fasta_sequences = asyncio.to_thread(lambda: list(SeqIO.parse(handle, "fasta")))
    for fasta_sequence in await fasta_sequences:
        yield NamedString(fasta_sequence.id, str(fasta_sequence.seq))

def _write_fasta_records(named_strings: Iterable[NamedString], handle: Union[str, TextIOWrapper]) -> int:
    records = [SeqRecord(Seq(named_string.sequence), id=named_string.name, description="") for named_string in named_strings]
    return SeqIO.write(records, handle, "fasta")

async def write_fasta(named_strings: Iterable[NamedString], handle: Union[str, TextIOWrapper]) -> int:
    return await asyncio.to_thread(_write_fasta_records, list(named_strings), handle)
