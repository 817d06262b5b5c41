#!/usr/bin/env python3
"""
Summary:
Paired-end k-mer adjacency assembly pipeline

Pipeline:
1) Read interleaved FASTQ -> list of reads (mates 2i, 2i+1)
2) Count canonical k-mers over quality-masked reads, pick trusted k-mers
3) Build the (k-2)-mer adjacency graph
4) Collapse unbranched paths into contigs
5) Re-path every read pair over the contigs (printed as diagnostics)
6) Outputs: contigs FASTA, GFA, DOT, histogram TSV, stats TSV, report, params JSON

"""

###############################
########### IMPORTS  ##########
###############################
from __future__ import annotations

from pathlib import Path
import argparse

from assembly_core import run_assembly


###############################
########## ARGUMENTS ##########
###############################
def parse_arguments(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="run_assembly.py",
        description=(
            "De novo assembly graph from paired-end short reads. "
            "Pipeline: FASTQ -> trusted k-mers -> adjacency graph -> contigs -> read paths."
        ),
    )
    parser.add_argument(
        "-I",
        "--input",
        required=True,
        type=Path,
        help="Interleaved paired-end FASTQ file (mates are consecutive records).",
    )
    parser.add_argument(
        "-O",
        "--output",
        required=True,
        type=Path,
        help="Output base name; writes <output>.fasta, <output>.gfa and <output>.dot.",
    )
    parser.add_argument(
        "-K",
        "--kmer-length",
        type=int,
        default=39,
        help="K-mer length (odd, >= 3). Default: 39",
    )
    parser.add_argument(
        "-Q",
        "--min-quality",
        type=int,
        default=7,
        help="Minimum quality to trust a call. Default: 7",
    )
    parser.add_argument(
        "-M",
        "--min-kmer-count",
        type=int,
        default=4,
        help="Minimum trusted k-mer count; <= 0 detects it from the histogram. Default: 4",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print diagnostics, no progress.",
    )

    args = parser.parse_args(argv)

    # ----- validation -----
    if args.kmer_length < 3:
        raise ValueError("K-mer length must be >= 3")

    if args.kmer_length % 2 == 0:
        raise ValueError("K-mer length must be odd")

    if args.min_quality < 0:
        raise ValueError("min-quality must be >= 0")

    if not args.input.exists():
        raise ValueError(f"Input FASTQ file does not exist: {args.input}")

    if not args.input.is_file():
        raise ValueError(f"Input path is not a file: {args.input}")

    args.output.parent.mkdir(parents=True, exist_ok=True)

    return args


###############################
######## MAIN LOGIC  ##########
###############################
def main(argv: list[str] | None = None) -> None:
    args = parse_arguments(argv)

    run_assembly(
        input=args.input,
        output=args.output,
        kmer_length=args.kmer_length,
        min_quality=args.min_quality,
        min_kmer_count=args.min_kmer_count,
        verbose=not args.quiet,
    )


if __name__ == "__main__":
    main()
