#!/usr/bin/env python3

"""
Summary:
    Build a bidirected k-mer adjacency graph from trusted k-mers.

Description:
    This module implements data structures and functions required
    to construct the graph where:
        - nodes are canonical (k-2)-mers (the interior of a k-mer)
        - every node keeps the set of single bases that may precede it and
          the set of single bases that may follow it
        - both sets are stored for the canonical orientation of the node

    This module contains NO file I/O besides the stats writer and NO CLI.
    It is intended to be imported and used by assembly_core.py.
"""

###############################
########### IMPORTS  ##########
###############################
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tqdm import tqdm

from dna import (
    complement_base,
    first_base,
    interior,
    is_canonical,
    last_base,
    predecessor,
    reverse_complement,
    successor,
)
from io_fastq import ExportError


class GraphConsistencyError(RuntimeError):
    """A k-mer that must be in the adjacency graph is missing."""


###############################
######## Record Class #########
###############################
@dataclass(frozen=True)
class KmerAdjacencies:
    """
    One node of the graph plus the bases seen on each side of it.

        # in example for k=5, trusted kmer=ACGTA
        # interior:     CGT (k-2)mer
        # predecessors: {A}  -> ACG precedes CGT
        # successors:   {A}  -> GTA follows CGT

    A record for the other strand swaps the two sets and complements them:
    TACGT has interior ACG, predecessor T (complement of A), successor T.
    """

    kmer: str
    predecessors: frozenset[str] = frozenset()
    successors: frozenset[str] = frozenset()

    def reverse_complement(self) -> KmerAdjacencies:
        return KmerAdjacencies(
            reverse_complement(self.kmer),
            frozenset(complement_base(base) for base in self.successors),
            frozenset(complement_base(base) for base in self.predecessors),
        )

    def canonical(self) -> KmerAdjacencies:
        return self if is_canonical(self.kmer) else self.reverse_complement()

    def predecessor_count(self) -> int:
        return len(self.predecessors)

    def successor_count(self) -> int:
        return len(self.successors)

    def sole_predecessor(self) -> str | None:
        """Full neighbouring (k-2)-mer on the left, if there is exactly one"""
        if len(self.predecessors) != 1:
            return None
        (base,) = self.predecessors
        return predecessor(self.kmer, base)

    def sole_successor(self) -> str | None:
        """Full neighbouring (k-2)-mer on the right, if there is exactly one"""
        if len(self.successors) != 1:
            return None
        (base,) = self.successors
        return successor(self.kmer, base)

    def predecessor_kmers(self) -> list[str]:
        return [predecessor(self.kmer, base) for base in sorted(self.predecessors)]

    def successor_kmers(self) -> list[str]:
        return [successor(self.kmer, base) for base in sorted(self.successors)]


def merge_adjacencies(
    first: KmerAdjacencies, second: KmerAdjacencies
) -> KmerAdjacencies:
    """Union of the edge sets of two records for the same (oriented) kmer"""
    if first.kmer != second.kmer:
        raise ValueError(
            f"Cannot merge adjacencies of different kmers: {first.kmer} vs {second.kmer}"
        )
    return KmerAdjacencies(
        first.kmer,
        first.predecessors | second.predecessors,
        first.successors | second.successors,
    )


###############################
######### Graph Class #########
###############################
class AdjacencyGraph:
    """
    Mapping canonical (k-2)mer -> KmerAdjacencies.

    Records are only ever added through add(), which canonicalizes the
    incoming record and merges it with whatever is already stored. Nothing
    is removed; once build_graph_from_kmers returns the graph is read-only.
    """

    def __init__(self, k: int):
        self.k = k
        self.node_len = k - 2

        self.nodes: dict[str, KmerAdjacencies] = {}

    def add(self, record: KmerAdjacencies) -> None:
        record = record.canonical()
        existing = self.nodes.get(record.kmer)
        if existing is None:
            self.nodes[record.kmer] = record
        else:
            self.nodes[record.kmer] = merge_adjacencies(existing, record)

    def lookup(self, kmer: str) -> KmerAdjacencies:
        """
        Strand-sensitive lookup: the stored record, flipped if kmer is the
        non-canonical orientation, so edges read in kmer's direction.
        """
        if is_canonical(kmer):
            record = self.nodes.get(kmer)
            flip = False
        else:
            record = self.nodes.get(reverse_complement(kmer))
            flip = True

        if record is None:
            raise GraphConsistencyError(
                f"can't find expected kmer in adjacencies graph: {kmer}"
            )
        return record.reverse_complement() if flip else record

    def __len__(self) -> int:
        return len(self.nodes)


###############################
######### Functions  ##########
###############################
def add_kmer(graph: AdjacencyGraph, kmer: str) -> None:
    """
    Register one trusted k-mer.

    Three nodes learn something from it (k=7, kmer=AACGTTG):
        ACGTT  (interior)        predecessor A, successor G
        AACGT  (left neighbour)  successor T
        CGTTG  (right neighbour) predecessor A
    so nodes seen only at the end of reads still carry the one-sided edge
    that was observed for them.
    """
    if len(kmer) != graph.k:
        raise ValueError(f"Invalid k-mer length: expected {graph.k}, got {len(kmer)}")

    middle = interior(kmer)
    graph.add(
        KmerAdjacencies(
            middle, frozenset(first_base(kmer)), frozenset(last_base(kmer))
        )
    )
    graph.add(KmerAdjacencies(kmer[:-2], successors=frozenset(last_base(middle))))
    graph.add(KmerAdjacencies(kmer[2:], predecessors=frozenset(first_base(middle))))


def build_graph_from_kmers(
    kmers: list[str], k: int, verbose: bool = False
) -> AdjacencyGraph:
    """
    Build the adjacency graph from trusted k-mers.

    Args:
        kmers:
            trusted k-mers (any orientation)
        k:
            k-mer length (odd, >= 3)

    Returns:
        AdjacencyGraph object
    """
    if k < 3:
        raise ValueError(f"k-mer length must be >= 3, got {k}")

    graph = AdjacencyGraph(k=k)

    for kmer in tqdm(kmers, desc="Building adjacencies", disable=not verbose):
        add_kmer(graph, kmer)

    return graph


def graph_stats(graph: AdjacencyGraph) -> dict[str, int]:
    """
    Compute basic statistics of the adjacency graph.

    Returns:
        dict with keys:
            - nodes: number of (k-2)mer nodes
            - adjacencies: total size of all edge sets
            - branch_nodes: nodes with more than one edge on a side
            - dead_ends: nodes with an empty edge set on a side
    """
    n_adjacencies = 0
    n_branches = 0
    n_dead_ends = 0

    for record in graph.nodes.values():
        n_adjacencies += record.predecessor_count() + record.successor_count()
        if record.predecessor_count() > 1 or record.successor_count() > 1:
            n_branches += 1
        if record.predecessor_count() == 0 or record.successor_count() == 0:
            n_dead_ends += 1

    return {
        "nodes": len(graph),
        "adjacencies": n_adjacencies,
        "branch_nodes": n_branches,
        "dead_ends": n_dead_ends,
    }


def write_graph_stats(stats: dict[str, int], path: Path) -> None:
    try:
        with open(path, "w") as handle:
            for key, value in stats.items():
                handle.write(f"{key}\t{value}\n")
    except OSError as err:
        raise ExportError(f"Failed to write graph stats: {path}") from err
