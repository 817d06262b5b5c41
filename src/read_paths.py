#!/usr/bin/env python3

"""
Summary:
    Re-project read pairs onto the assembled contigs.

Description:
    Every (k-2)-mer of every contig is indexed to its contig and offset.
    Each read (and the reverse complement of its mate) is then re-walked
    window by window; consecutive windows hitting the same contig strand at
    offsets that advance by one are merged into a PathSpan, runs of windows
    that hit nothing become a PathGap.

    Example diagnostics line for one pair (contig 3 is 120 bases long):
        Pair 0: 3:0-49/119 | 2X ~3:12-59/119
"""

###############################
########### IMPORTS  ##########
###############################
from __future__ import annotations

from typing import NamedTuple, Union

from tqdm import tqdm

from dna import reverse_complement
from io_fastq import ReadRecord
from kmers import iter_kmers
from traversal import Contig, ContigStrand, Strand


###############################
########### TYPES #############
###############################
class PathSpan(NamedTuple):
    """Read windows matching contig positions [start, end)."""

    contig: ContigStrand
    start: int
    end: int


class PathGap(NamedTuple):
    """Number of consecutive read windows without any contig hit."""

    length: int


PathInterval = Union[PathSpan, PathGap]


###############################
########## FUNCTIONS ##########
###############################
def pathing_sequence(bases: str) -> str:
    """
    Upper-case A/C/G are kept, every other call becomes T.

    This also turns the N used for masked calls into T, so a masked window
    can still hit a contig here even though it was never counted as trusted.
    """
    return "".join(base if base in "ACG" else "T" for base in bases.upper())


def build_contig_kmer_index(
    contigs: list[Contig], kmer_len: int
) -> dict[str, PathSpan]:
    """Map every literal kmer of every contig to (contig, offset, offset+kmer_len)"""
    index: dict[str, PathSpan] = {}

    for contig_id, contig in enumerate(contigs):
        forward = ContigStrand(contig_id, Strand.FORWARD)
        for offset, kmer in enumerate(iter_kmers(contig.sequence, kmer_len)):
            index[kmer] = PathSpan(forward, offset, offset + kmer_len)

    return index


def _locate(
    kmer: str,
    index: dict[str, PathSpan],
    contigs: list[Contig],
) -> PathSpan | None:
    hit = index.get(kmer)
    if hit is not None:
        return hit

    rc_hit = index.get(reverse_complement(kmer))
    if rc_hit is None:
        return None

    # same kmer read on the other strand: mirror the offsets
    contig_len = len(contigs[rc_hit.contig.contig].sequence)
    return PathSpan(
        rc_hit.contig.flip(), contig_len - rc_hit.end, contig_len - rc_hit.start
    )


def path_read(
    bases: str,
    index: dict[str, PathSpan],
    contigs: list[Contig],
    kmer_len: int,
) -> list[PathInterval]:
    """Ordered spans and gaps of one read, in read order"""
    read_path: list[PathInterval] = []
    current: PathSpan | None = None
    miss_count = 0

    for kmer in iter_kmers(pathing_sequence(bases), kmer_len):
        hit = _locate(kmer, index, contigs)

        if hit is None:
            if current is not None:
                read_path.append(current)
                current = None
            miss_count += 1
        elif current is None:
            if miss_count > 0:
                read_path.append(PathGap(miss_count))
                miss_count = 0
            current = hit
        elif hit.contig == current.contig and hit.end == current.end + 1:
            current = PathSpan(current.contig, current.start, hit.end)
        else:
            read_path.append(current)
            current = hit

    if miss_count > 0:
        read_path.append(PathGap(miss_count))
    if current is not None:
        read_path.append(current)

    return read_path


def path_read_pairs(
    reads: list[ReadRecord],
    contigs: list[Contig],
    kmer_len: int,
    verbose: bool = False,
) -> list[list[PathInterval]]:
    """
    Paths of all reads, two per pair: the first mate as sequenced, then the
    reverse complement of the second mate.
    """
    index = build_contig_kmer_index(contigs, kmer_len)

    read_paths: list[list[PathInterval]] = []
    pairs = range(0, len(reads) - 1, 2)
    for read_id in tqdm(pairs, desc="Pathing read pairs", disable=not verbose):
        mate1 = reads[read_id].bases
        mate2 = reverse_complement(reads[read_id + 1].bases)
        read_paths.append(path_read(mate1, index, contigs, kmer_len))
        read_paths.append(path_read(mate2, index, contigs, kmer_len))

    return read_paths


def format_interval(interval: PathInterval, contigs: list[Contig]) -> str:
    if isinstance(interval, PathGap):
        return f"{interval.length}X"
    contig_len = len(contigs[interval.contig.contig].sequence)
    return f"{interval.contig}:{interval.start}-{interval.end - 1}/{contig_len - 1}"


def format_read_path(read_path: list[PathInterval], contigs: list[Contig]) -> str:
    return " ".join(format_interval(interval, contigs) for interval in read_path)


def format_pair_lines(
    read_paths: list[list[PathInterval]], contigs: list[Contig]
) -> list[str]:
    lines = []
    for pair_id in range(len(read_paths) // 2):
        mate1 = format_read_path(read_paths[2 * pair_id], contigs)
        mate2 = format_read_path(read_paths[2 * pair_id + 1], contigs)
        lines.append(f"Pair {pair_id}: {mate1} | {mate2}")
    return lines
