import asyncio
from contextlib import AbstractAsyncContextManager
import logging
import os
from os import path
from typing import Mapping, Union

from aiohttp import ClientError, ClientSession, ClientTimeout

from hivlocator.engine.data.local.fasta import read_fasta, write_fasta
from hivlocator.engine.data.remote.databases.ncbi import amino_acid_sequence, fetch_ncbi_genbank, nucleotide_sequence
from hivlocator.engine.exceptions.locator import NoSuchReferenceException, ReferenceRetrievalException
from hivlocator.engine.structures.genomics import AMINO_ACID, NUCLEOTIDE, SEQUENCE_TYPES, NamedString, ReferenceSequence

logger = logging.getLogger(__name__)

KNOWN_REFERENCES: Mapping[str, str] = {
    "HXB2": "K03455.1",
    "SIVmm239": "M33262.1"
}

CACHE_ENVIRONMENT_VARIABLE = "HIVLOCATOR_CACHE"


def default_cache_path() -> str:
    return os.environ.get(CACHE_ENVIRONMENT_VARIABLE, path.join(path.expanduser("~"), ".cache", "hivlocator"))


class ReferenceProvider(AbstractAsyncContextManager):
    """
    Serves the reference genomes of a small fixed catalogue. Sequences are read
    from a local FASTA cache and downloaded from NCBI GenBank on first use.
    """

    def __init__(self, cache_path: Union[str, None] = None, timeout: float = 60):
        self._cache_path = cache_path if cache_path is not None else default_cache_path()
        self._timeout = timeout
        self._http_client: Union[ClientSession, None] = None
        self._references: dict[tuple[str, str], ReferenceSequence] = {}

    async def __aenter__(self):
        return self

    def get_reference_cache_path(self, name: str, kind: str) -> str:
        return path.join(self._cache_path, f"{name}_{kind}.fasta")

    async def get_reference(self, name: str, kind: str = NUCLEOTIDE) -> ReferenceSequence:
        if name not in KNOWN_REFERENCES:
            raise NoSuchReferenceException(name)
        if kind not in SEQUENCE_TYPES:
            raise NoSuchReferenceException(name, kind)
        if (name, kind) in self._references:
            return self._references[(name, kind)]

        reference = await self.load_cached_reference(name, kind)
        if reference is None:
            await self.download_reference(name)
            reference = self._references[(name, kind)]
        self._references[(name, kind)] = reference
        return reference

    async def load_cached_reference(self, name: str, kind: str) -> Union[ReferenceSequence, None]:
        cache_file = self.get_reference_cache_path(name, kind)
        if not path.exists(cache_file):
            return None
        async for named_string in read_fasta(cache_file):
            logger.debug("Loaded %s (%s) from %s", name, kind, cache_file)
            return ReferenceSequence(name, kind, KNOWN_REFERENCES[name], named_string.sequence.upper())
        return None

    async def download_reference(self, name: str):
        accession = KNOWN_REFERENCES[name]
        if self._http_client is None:
            self._http_client = ClientSession(timeout=ClientTimeout(self._timeout))
        logger.info("Fetching %s (%s) from NCBI GenBank", name, accession)
        try:
            record = await fetch_ncbi_genbank(accession, self._http_client)
        except (ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ReferenceRetrievalException(name, accession, str(e)) from e

        sequences = {
            NUCLEOTIDE: nucleotide_sequence(record),
            AMINO_ACID: amino_acid_sequence(record)
        }
        os.makedirs(self._cache_path, exist_ok=True)
        for kind, sequence in sequences.items():
            if len(sequence) == 0:
                raise ReferenceRetrievalException(name, accession, f"record has no {kind} sequence")
            self._references[(name, kind)] = ReferenceSequence(name, kind, accession, sequence)
            await write_fasta([NamedString(accession, sequence)], self.get_reference_cache_path(name, kind))
        logger.info("Cached %s references in %s", name, self._cache_path)

    async def close(self):
        if self._http_client is not None:
            await self._http_client.close()
            self._http_client = None

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.close()


async def get_reference(name: str, kind: str = NUCLEOTIDE, cache_path: Union[str, None] = None) -> ReferenceSequence:
    async with ReferenceProvider(cache_path) as provider:
        return await provider.get_reference(name, kind)
