import asyncio
from os import path

from Bio import SeqIO
import pytest

from hivlocator.engine.analysis.locator import AsyncLocatorEngine, locate
from hivlocator.engine.analysis.myers import find_best_match
from hivlocator.engine.data.references import ReferenceProvider
from hivlocator.engine.exceptions.locator import LocatorException
from hivlocator.engine.settings import LocatorSettings
from hivlocator.engine.structures.alignment import LocatedAlignment

ONE_LOC_START = 2648
ONE_LOC_END = 3209
ONE_LOC_IDENTITY = 83.98576512455516


def read_resource(resources_path: str, filename: str) -> dict[str, str]:
    return {record.id: str(record.seq) for record in SeqIO.parse(path.join(resources_path, filename), "fasta")}

async def load_reference(name: str, kind: str) -> str:
    async with ReferenceProvider(timeout=30) as provider:
        return (await provider.get_reference(name, kind)).sequence

def reference_or_skip(name: str, kind: str) -> str:
    try:
        return asyncio.run(load_reference(name, kind))
    except LocatorException as e:
        pytest.skip(f"{name} reference unavailable: {e}")

@pytest.fixture
def fixture_queries(resources_path):
    return read_resource(resources_path, "hxb2_queries.fasta")

@pytest.fixture
def one_loc_alignment(resources_path):
    return read_resource(resources_path, "hxb2_one_loc_alignment.fasta")

@pytest.fixture
async def hxb2_masked(tmp_path, one_loc_alignment):
    """HXB2 with every residue outside 2648-3209 masked as N, served through the reference cache."""
    masked = "N" * (ONE_LOC_START - 1) + one_loc_alignment["ref_aligned"]
    (tmp_path / "HXB2_nt.fasta").write_text(f">K03455.1\n{masked}\n")
    async with ReferenceProvider(str(tmp_path)) as provider:
        return (await provider.get_reference("HXB2", "nt")).sequence

@pytest.fixture(scope="module")
def hxb2():
    return reference_or_skip("HXB2", "nt")


class TestOneLoc:
    def test_direct_reproduces_alignment(self, hxb2_masked: str, fixture_queries, one_loc_alignment):
        located = locate(fixture_queries["ONE_LOC"], hxb2_masked, LocatorSettings(algorithm=1))
        assert (located.ref_start, located.ref_end) == (ONE_LOC_START, ONE_LOC_END)
        assert located.percent_identity == pytest.approx(ONE_LOC_IDENTITY, abs=1e-9)
        assert located.has_indel is True
        assert located.query_aligned == one_loc_alignment["query_aligned"]
        assert located.ref_aligned == one_loc_alignment["ref_aligned"]

    def test_windowed_stays_within_probe_window(self, hxb2_masked: str, fixture_queries):
        query = fixture_queries["ONE_LOC"]
        head = find_best_match(query[:100], hxb2_masked, 30)
        tail = find_best_match(query[-100:], hxb2_masked, 30)
        located = locate(query, hxb2_masked, LocatorSettings(algorithm=2))
        if head is None or tail is None or head.ref_start >= tail.ref_end:
            assert located == locate(query, hxb2_masked, LocatorSettings(algorithm=1))
        else:
            assert head.ref_start + 1 <= located.ref_start <= located.ref_end <= tail.ref_end
        assert len(located.query_aligned) == len(located.ref_aligned)

    def test_result_line_fields(self, hxb2_masked: str, fixture_queries):
        located = locate(fixture_queries["ONE_LOC"], hxb2_masked)
        assert isinstance(located, LocatedAlignment)
        assert located.query_aligned.replace("-", "") == fixture_queries["ONE_LOC"]
        assert located.ref_aligned.replace("-", "") == hxb2_masked[ONE_LOC_START - 1:ONE_LOC_END]


@pytest.mark.parametrize("algorithm", [1, 2])
def test_two_loc_both_algorithms(hxb2: str, fixture_queries, algorithm: int):
    located = locate(fixture_queries["TWO_LOC"], hxb2, LocatorSettings(algorithm=algorithm))
    assert (located.ref_start, located.ref_end) == (6585, 7208)

def test_minimum_length_query(hxb2: str):
    located = locate("ATGC", hxb2)
    assert located.ref_start > 0
    assert located.ref_end > located.ref_start

async def test_batch_of_two_in_order(hxb2: str, fixture_queries):
    with AsyncLocatorEngine(hxb2) as engine:
        results = await engine.locate_in_order([fixture_queries["TWO_LOC"], fixture_queries["ONE_LOC"]])
    assert [located.ref_start for located in results] == [6585, ONE_LOC_START]
