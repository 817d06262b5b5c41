#!/usr/bin/env python3
"""
traversal.py - unitig extraction from the adjacency graph
"""
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

from dbg import AdjacencyGraph, KmerAdjacencies
from dna import reverse_complement


class Strand(Enum):
    FORWARD = "+"
    REVERSE = "-"


class ContigStrand(NamedTuple):
    """Contig index plus the strand it is read on."""

    contig: int
    strand: Strand

    @property
    def is_reverse(self) -> bool:
        return self.strand is Strand.REVERSE

    def flip(self) -> "ContigStrand":
        other = Strand.FORWARD if self.is_reverse else Strand.REVERSE
        return ContigStrand(self.contig, other)

    def __str__(self) -> str:
        return f"~{self.contig}" if self.is_reverse else str(self.contig)


class Contig(NamedTuple):
    sequence: str
    first: KmerAdjacencies
    last: KmerAdjacencies


def is_contig_start(record: KmerAdjacencies, graph: AdjacencyGraph) -> bool:
    """No unique predecessor, or the predecessor forks."""
    pred = record.sole_predecessor()
    if pred is None:
        return True
    return graph.lookup(pred).successor_count() > 1


def is_contig_end(record: KmerAdjacencies, graph: AdjacencyGraph) -> bool:
    """No unique successor, or the successor is a merge point."""
    succ = record.sole_successor()
    if succ is None:
        return True
    return graph.lookup(succ).predecessor_count() > 1


def _claim(
    claims: Dict[str, ContigStrand], kmer: str, contig_id: int
) -> None:
    claims[kmer] = ContigStrand(contig_id, Strand.FORWARD)
    claims[reverse_complement(kmer)] = ContigStrand(contig_id, Strand.REVERSE)


def build_contig(
    seed: KmerAdjacencies,
    graph: AdjacencyGraph,
    claims: Dict[str, ContigStrand],
    contig_id: int,
) -> Contig:
    """
    Walk forward from seed while the path stays unbranched on both sides.

    Every kmer walked over is claimed for contig_id (and its reverse
    complement for the other strand). The walk also stops in front of an
    already claimed kmer, which is what ends a cycle at its seed.
    """
    sequence = [seed.kmer]
    _claim(claims, seed.kmer, contig_id)

    current = seed
    while True:
        succ_kmer = current.sole_successor()
        if succ_kmer is None:
            break
        succ = graph.lookup(succ_kmer)
        if succ.predecessor_count() > 1 or succ_kmer in claims:
            break
        sequence.append(succ_kmer[-1])
        _claim(claims, succ_kmer, contig_id)
        current = succ

    return Contig("".join(sequence), seed, current)


def _seed_for(
    record: KmerAdjacencies, graph: AdjacencyGraph
) -> Optional[KmerAdjacencies]:
    if is_contig_start(record, graph):
        return record
    if is_contig_end(record, graph):
        return record.reverse_complement()
    return None


def extract_contigs(
    graph: AdjacencyGraph,
) -> Tuple[List[Contig], Dict[str, ContigStrand]]:
    """
    Collapse the graph into maximal unbranched contigs.

    Nodes are visited in sorted order so contig numbering is reproducible.
    Pass 1 seeds from nodes that start a contig on either strand. Pass 2
    picks up whatever is left, which can only be perfect cycles.

    Returns:
        contigs, and the claim map kmer -> ContigStrand holding every node
        kmer in both orientations
    """
    contigs: List[Contig] = []
    claims: Dict[str, ContigStrand] = {}
    order = sorted(graph.nodes)

    for kmer in order:
        if kmer in claims:
            continue
        seed = _seed_for(graph.nodes[kmer], graph)
        if seed is not None:
            contigs.append(build_contig(seed, graph, claims, len(contigs)))

    for kmer in order:
        if kmer not in claims:
            contigs.append(
                build_contig(graph.nodes[kmer], graph, claims, len(contigs))
            )

    return contigs, claims


def contig_stats(contigs: List[Contig]) -> dict:
    """Contig count, total, longest, shortest and mean length, N50"""
    if not contigs:
        return {
            "num_contigs": 0, "total_length": 0, "longest": 0,
            "shortest": 0, "mean_length": 0, "n50": 0
        }

    lengths = sorted((len(contig.sequence) for contig in contigs), reverse=True)
    total = sum(lengths)

    # smallest length whose contigs, together with all longer ones, cover half
    covered = 0
    n50 = lengths[-1]
    for length in lengths:
        covered += length
        if 2 * covered >= total:
            n50 = length
            break

    return {
        "num_contigs": len(lengths),
        "total_length": total,
        "longest": lengths[0],
        "shortest": lengths[-1],
        "mean_length": round(total / len(lengths), 1),
        "n50": n50,
    }
