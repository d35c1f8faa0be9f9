from Bio.Data.IUPACData import ambiguous_dna_letters, extended_protein_letters

from hivlocator.engine.data.references import KNOWN_REFERENCES
from hivlocator.engine.exceptions.locator import InvalidQueryException
from hivlocator.engine.settings import ALGORITHMS
from hivlocator.engine.structures.genomics import AMINO_ACID, NUCLEOTIDE, SEQUENCE_TYPES

MINIMUM_QUERY_LENGTH = 4

ALPHABETS = {
    NUCLEOTIDE: frozenset(ambiguous_dna_letters + "U"),
    AMINO_ACID: frozenset(extended_protein_letters + "*")
}

SEQUENCE_NAMES = {
    NUCLEOTIDE: "Nucleotide",
    AMINO_ACID: "Amino acid"
}


def validate_sequence_type(kind: str) -> str:
    if kind not in SEQUENCE_TYPES:
        raise InvalidQueryException("Type of query must be either 'nt' or 'aa'")
    return kind

def validate_algorithm(algorithm: int) -> int:
    if algorithm not in ALGORITHMS:
        raise InvalidQueryException("Algorithm must be either 1 or 2")
    return algorithm

def validate_reference_name(name: str) -> str:
    if name not in KNOWN_REFERENCES:
        raise InvalidQueryException("Reference genome must be either 'HXB2' or 'SIVmm239'")
    return name

def validate_query(query: str, kind: str = NUCLEOTIDE) -> str:
    """Checks a query against the IUPAC alphabet of its type and returns it upper-cased."""
    validate_sequence_type(kind)
    if len(query) == 0:
        raise InvalidQueryException("Query sequence cannot be empty")
    normalized = query.upper()
    if not ALPHABETS[kind].issuperset(normalized):
        raise InvalidQueryException(f"Invalid {SEQUENCE_NAMES[kind].lower()} sequence: {query}")
    if len(normalized) < MINIMUM_QUERY_LENGTH:
        raise InvalidQueryException(f"{SEQUENCE_NAMES[kind]} sequence length too short")
    return normalized
