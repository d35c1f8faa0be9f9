from io import StringIO
from aiohttp import ClientSession
from Bio import SeqIO
from Bio.SeqRecord import SeqRecord

EFETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"


def parse_genbank_record(genbank_text: str) -> SeqRecord:
    return SeqIO.read(StringIO(genbank_text), "genbank")

def nucleotide_sequence(record: SeqRecord) -> str:
    return str(record.seq).upper()

def amino_acid_sequence(record: SeqRecord) -> str:
    # Translated proteins of every annotated CDS, joined in genome order.
    coding_features = sorted(
        (feature for feature in record.features if feature.type == "CDS" and "translation" in feature.qualifiers),
        key=lambda feature: int(feature.location.start)
    )
    return "".join(feature.qualifiers["translation"][0] for feature in coding_features).upper()

async def fetch_ncbi_genbank(accession: str, http_client: ClientSession) -> SeqRecord:
    async with http_client.get(EFETCH_URL, params={
        "db": "nucleotide",
        "id": accession,
        "rettype": "gb",
        "retmode": "text"
    }) as response:
        response.raise_for_status()
        genbank_text = await response.text()
    return parse_genbank_record(genbank_text)
