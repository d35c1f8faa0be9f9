from typing import Union


class LocatorException(Exception):
    pass

class InvalidQueryException(LocatorException, ValueError):
    pass

class NoSuchReferenceException(LocatorException, LookupError):
    def __init__(self, reference_name: str, kind: Union[str, None] = None):
        if kind is None:
            message = f"Reference genome must be either 'HXB2' or 'SIVmm239' (got \"{reference_name}\")."
        else:
            message = f"No \"{kind}\" reference is available for \"{reference_name}\"."
        super().__init__(message)
        self.reference_name = reference_name
        self.kind = kind

class ReferenceRetrievalException(LocatorException):
    def __init__(self, reference_name: str, accession: str, reason: str):
        super().__init__(f"Unable to retrieve reference \"{reference_name}\" ({accession}): {reason}")
        self.reference_name = reference_name
        self.accession = accession

class AlignmentFailedException(LocatorException):
    def __init__(self, query_length: int, reference_length: int):
        super().__init__(f"Semi-global alignment produced no path (query length {query_length}, reference length {reference_length}).")

class NoAlignmentException(LocatorException):
    def __init__(self, query_index: int):
        super().__init__("Locator not found")
        self.query_index = query_index
