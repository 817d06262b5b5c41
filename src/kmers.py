#!/usr/bin/env python3

"""
Summary:
    Count canonical k-mers across quality-masked reads and pick the trusted ones.

Input:
    - list of reads (bases + phred qualities)
    - integer k, minimum base quality, minimum k-mer count (<= 0 -> auto)

Output:
    - trusted k-mers (count >= threshold)
    - k-mer count histogram, optionally written to a TSV file

    Interpretation
    count	n_kmers
    1	20340       # there are 20 340 distinct kmers that appear exactly once
    2	1653
    .
    .
    .
    10	18
    11	1           # there is just one unique kmer that appears eleven times

    Calls with quality below the minimum are replaced by N before k-merizing,
    so those windows are still counted (and show up in the histogram) but
    never become trusted: the adjacency graph is built over A/C/G/T only.
"""

###############################
########### IMPORTS  ##########
###############################
from pathlib import Path
from tqdm import tqdm
from collections import defaultdict
from typing import NamedTuple
import argparse

from dna import BASES, canonical
from io_fastq import ExportError, ReadRecord


WILDCARD = "N"
DEFAULT_MIN_KMER_COUNT = 3


###############################
########## ARGUMENTS ##########
###############################
def parse_arguments():
    parser = argparse.ArgumentParser(
        prog="kmers.py",
        description="Count canonical kmers of an interleaved FASTQ file and write the count histogram -> .tsv",
    )
    parser.add_argument(
        "-I",
        "--input",
        required=True,
        type=Path,
        help="Path to interleaved paired-end FASTQ file",
    )
    parser.add_argument(
        "-O",
        "--output",
        required=True,
        type=Path,
        help="Path where to save .tsv file with counted frequencies of kmers",
    )
    parser.add_argument(
        "-K", "--kmer-length", type=int, default=39, help="Kmer length. Default: 39"
    )
    parser.add_argument(
        "-Q",
        "--min-quality",
        type=int,
        default=7,
        help="Calls below this quality are masked as N. Default: 7",
    )

    args = parser.parse_args()

    args.output.parent.mkdir(parents=True, exist_ok=True)
    # check if user provide proper extension, unless, make it properly
    if args.output.suffix.lower() != ".tsv":
        args.output = args.output.with_suffix(".tsv")

    if args.kmer_length <= 0:
        raise ValueError("K-mer length must be a positive integer")

    if not args.input.exists():
        raise ValueError(f"Input FASTQ file does not exist: {args.input}")

    if not args.input.is_file():
        raise ValueError(f"Input path is not a file: {args.input}")

    return args


###############################
########### TYPES #############
###############################
class KmerSpectrum(NamedTuple):
    trusted: list[str]
    histogram: dict[int, int]
    min_kmer_count: int
    n_distinct: int


###############################
########## FUNCTIONS ##########
###############################
def mask_low_quality(read: ReadRecord, min_quality: int) -> str:
    """Replace every call with quality < min_quality by the wildcard N"""
    return "".join(
        base if qual >= min_quality else WILDCARD
        for base, qual in zip(read.bases, read.quals)
    )


def iter_kmers(read: str, k: int):
    """
    Generate all kmers from a single read

    Args:
        read: nucleotide sequence
        k: kmer length
    Yields:
        succesive kmers as strings
    """
    read_len = len(read)
    if read_len < k:
        return

    for i in range(read_len - k + 1):
        yield read[i : i + k]


def count_kmers(
    reads: list[ReadRecord], k: int, min_quality: int, verbose: bool = False
) -> dict[str, int]:
    """
    Count canonical k-mer frequencies across all quality-masked reads

    args:
        reads: list of reads
        k: kmer length
        min_quality: calls below it are masked, not dropped

    Returns: dictionary mapping canonical kmer -> occurence count
    """
    kmer_counts: dict[str, int] = defaultdict(int)

    for read in tqdm(reads, desc="Counting k-mers", disable=not verbose):
        for kmer in iter_kmers(mask_low_quality(read, min_quality), k):
            kmer_counts[canonical(kmer)] += 1

    return dict(kmer_counts)


def kmer_histogram(kmer_counts: dict[str, int]) -> dict[int, int]:
    """
    Build histogram of kmer counts

    args:
        kmer_counts: dict mapping kmer (str) -> count (int)

    returns:
        Dict mapping count -> number of kmers with that count, ascending by count
    """

    histogram: dict[int, int] = defaultdict(int)

    for count in kmer_counts.values():
        histogram[count] += 1

    return dict(sorted(histogram.items()))


def find_min_kmer_count(histogram: dict[int, int]) -> int:
    """
    Count at the first local minimum of the histogram.

    The trough is only accepted once the curve went down at least once and
    then stopped going down: a strict rise, or a plateau that is not followed
    by another decrease. Equal neighbours keep the scan going and the first
    count of such a plateau is reported. Empty histograms and strictly
    decreasing or increasing ones fall back to DEFAULT_MIN_KMER_COUNT.

    {1: 50, 2: 5, 3: 2, 4: 6, 5: 9} -> 3
    {1: 50, 2: 5, 3: 5}             -> 2
    """
    trough = None  # (count, n_kmers)
    seen_decrease = False
    on_plateau = False

    for count, n_kmers in sorted(histogram.items()):
        if trough is None:
            trough = (count, n_kmers)
        elif n_kmers < trough[1]:
            trough = (count, n_kmers)
            seen_decrease = True
            on_plateau = False
        elif n_kmers > trough[1]:
            if seen_decrease:
                return trough[0]
            trough = (count, n_kmers)
        else:
            on_plateau = True

    if seen_decrease and on_plateau:
        return trough[0]
    return DEFAULT_MIN_KMER_COUNT


def trusted_kmers(kmer_counts: dict[str, int], min_kmer_count: int) -> list[str]:
    """Kmers seen at least min_kmer_count times, wildcard-free, in counting order"""
    return [
        kmer
        for kmer, count in kmer_counts.items()
        if count >= min_kmer_count and not set(kmer).difference(BASES)
    ]


def filter_kmers(
    reads: list[ReadRecord],
    k: int,
    min_quality: int,
    min_kmer_count: int,
    verbose: bool = False,
) -> KmerSpectrum:
    kmer_counts = count_kmers(reads, k, min_quality, verbose=verbose)
    histogram = kmer_histogram(kmer_counts)

    if min_kmer_count <= 0:
        min_kmer_count = find_min_kmer_count(histogram)

    return KmerSpectrum(
        trusted=trusted_kmers(kmer_counts, min_kmer_count),
        histogram=histogram,
        min_kmer_count=min_kmer_count,
        n_distinct=len(kmer_counts),
    )


def format_histogram(spectrum: KmerSpectrum) -> list[str]:
    lines = [f"minKCount={spectrum.min_kmer_count}"]
    for count, n_kmers in spectrum.histogram.items():
        lines.append(f"{count}\t{n_kmers}")
    return lines


def write_kmer_histogram(histogram: dict[int, int], path: Path) -> None:
    """
    Save kmer count histogram to TSV file
    Format:
        count \t number_of_kmers
    """

    try:
        with open(path, "w") as handle:
            handle.write("count\tn_kmers\n")
            for count in sorted(histogram):
                handle.write(f"{count}\t{histogram[count]}\n")
    except OSError as err:
        raise ExportError(f"Failed to write k-mer histogram: {path}") from err


###############################
######## MAIN LOGIC  ##########
###############################
def main():
    args = parse_arguments()

    from io_fastq import fastq_to_reads

    reads = fastq_to_reads(args.input)

    kmer_counts = count_kmers(reads, args.kmer_length, args.min_quality, verbose=True)
    histogram = kmer_histogram(kmer_counts)

    write_kmer_histogram(histogram, args.output)
    print(f"minKCount={find_min_kmer_count(histogram)}")


if __name__ == "__main__":
    main()
