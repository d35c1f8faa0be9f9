import argparse
import asyncio
import logging
import sys
from importlib.metadata import PackageNotFoundError, version

from hivlocator.engine.analysis.locator import AsyncLocatorEngine
from hivlocator.engine.data.references import ReferenceProvider
from hivlocator.engine.exceptions.locator import LocatorException, NoAlignmentException
from hivlocator.engine.settings import LocatorSettings
from hivlocator.engine.validation import validate_algorithm, validate_query, validate_reference_name, validate_sequence_type
from hivlocator.engine.writing import write_located_alignments

ERROR_PREFIX = "\x1b[1;91mError:\x1b[0m"

try:
    __version__ = version("hivlocator")
except PackageNotFoundError:
    __version__ = "unknown"

root_parser = argparse.ArgumentParser(
    prog="hivlocator",
    description="Simple LANL's HIV locator tool implementation in Python CLI"
)
root_parser.add_argument(
    "--query", "-q",
    nargs="+",
    action="extend",
    dest="queries",
    required=False,
    default=[],
    type=str,
    help="Query sequence. Multiple can be listed."
)
root_parser.add_argument(
    "--reference", "-r",
    dest="reference",
    required=False,
    default="HXB2",
    type=str,
    help="Reference genome, either HXB2 or SIVmm239."
)
root_parser.add_argument(
    "--type-query", "-t",
    dest="type_query",
    required=False,
    default="nt",
    type=str,
    help="Type of query, either nt or aa."
)
root_parser.add_argument(
    "--algorithm", "-a",
    dest="algorithm",
    required=False,
    default=1,
    type=int,
    help="Algorithm for locator, 1 is accurate but slower, 2 is fast but less accurate for long query sequences."
)
root_parser.add_argument(
    "--reference-cache",
    dest="reference_cache",
    required=False,
    default=None,
    type=str,
    help="Directory where downloaded reference genomes are cached."
)
root_parser.add_argument(
    "--threads",
    dest="threads",
    required=False,
    default=4,
    type=int,
    help="Number of queries to locate in parallel."
)
root_parser.add_argument(
    "--verbose", "-v",
    dest="verbose",
    action="store_true",
    default=False,
    help="Log progress to standard error."
)
root_parser.add_argument(
    "--version",
    action="version",
    version=f"%(prog)s {__version__}"
)


def validate_args(args: argparse.Namespace) -> list[str]:
    validate_sequence_type(args.type_query)
    validate_algorithm(args.algorithm)
    validate_reference_name(args.reference)
    if len(args.queries) == 0:
        validate_query("", args.type_query)
    return [validate_query(query, args.type_query) for query in args.queries]

async def locate_queries(args: argparse.Namespace):
    queries = validate_args(args)
    settings = LocatorSettings(algorithm=args.algorithm)
    async with ReferenceProvider(args.reference_cache) as reference_provider:
        reference = await reference_provider.get_reference(args.reference, args.type_query)
    with AsyncLocatorEngine(reference.sequence, settings, max_threads=max(1, args.threads)) as engine:
        results = await engine.locate_in_order(queries)
    for index, located in enumerate(results):
        if located is None:
            raise NoAlignmentException(index)
    write_located_alignments(results, sys.stdout)

def run_asynchronously(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )
    try:
        asyncio.run(locate_queries(args))
    except LocatorException as e:
        print(f"{ERROR_PREFIX} {e}", file=sys.stderr)
        return 1
    return 0

def run():
    args = root_parser.parse_args()
    sys.exit(run_asynchronously(args))


if __name__ == "__main__":
    run()
