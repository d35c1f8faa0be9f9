from dataclasses import dataclass

NUCLEOTIDE = "nt"
AMINO_ACID = "aa"
SEQUENCE_TYPES = (NUCLEOTIDE, AMINO_ACID)

@dataclass(frozen=True)
class NamedString:
    name: str
    sequence: str

@dataclass(frozen=True)
class ReferenceSequence:
    name: str
    kind: str
    accession: str
    sequence: str

    def __len__(self):
        return len(self.sequence)
