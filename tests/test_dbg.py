"""
Tests for adjacency records and the graph builder.
"""

import pytest

from conftest import unique_sequence

from dbg import (
    AdjacencyGraph,
    GraphConsistencyError,
    KmerAdjacencies,
    add_kmer,
    build_graph_from_kmers,
    graph_stats,
    merge_adjacencies,
)
from dna import canonical, interior
from kmers import iter_kmers


def _adj(kmer, preds="", succs=""):
    return KmerAdjacencies(kmer, frozenset(preds), frozenset(succs))


class TestKmerAdjacencies:
    """Single node records"""

    def test_reverse_complement_swaps_and_complements(self):
        record = _adj("CGT", preds="A", succs="AC")
        flipped = record.reverse_complement()
        assert flipped == _adj("ACG", preds="TG", succs="T")
        assert flipped.reverse_complement() == record

    def test_canonical(self):
        assert _adj("GGT", preds="C", succs="T").canonical() == _adj(
            "ACC", preds="A", succs="G"
        )
        assert _adj("ACC", preds="A").canonical() == _adj("ACC", preds="A")

    def test_sole_neighbours(self):
        record = _adj("ACC", preds="A", succs="GT")
        assert record.sole_predecessor() == "AAC"
        assert record.sole_successor() is None
        assert record.successor_kmers() == ["CCG", "CCT"]
        assert _adj("ACC").sole_predecessor() is None

    def test_merge_is_idempotent_and_commutative(self):
        a = _adj("ACC", preds="A", succs="G")
        b = _adj("ACC", succs="T")
        ab = merge_adjacencies(a, b)

        assert merge_adjacencies(a, a) == a
        assert merge_adjacencies(b, a) == ab
        assert merge_adjacencies(ab, a) == ab
        assert ab == _adj("ACC", preds="A", succs="GT")

    def test_merge_different_kmers_rejected(self):
        with pytest.raises(ValueError):
            merge_adjacencies(_adj("ACC"), _adj("ACG"))


class TestGraphBuilder:
    """Three records per trusted kmer, all canonical"""

    def test_single_kmer(self):
        graph = build_graph_from_kmers(["AACCG"], 5)

        assert graph.nodes == {
            "AAC": _adj("AAC", succs="C"),
            "ACC": _adj("ACC", preds="A", succs="G"),
            "CCG": _adj("CCG", preds="A"),
        }

    def test_strand_of_trusted_kmer_does_not_matter(self):
        forward = build_graph_from_kmers(["AACCG"], 5)
        reverse = build_graph_from_kmers(["CGGTT"], 5)
        both = build_graph_from_kmers(["CGGTT", "AACCG", "AACCG"], 5)

        assert forward.nodes == reverse.nodes == both.nodes

    def test_fork(self, fork_kmers):
        graph = build_graph_from_kmers(fork_kmers, 5)

        assert graph.nodes["ACC"] == _adj("ACC", preds="A", succs="GT")
        # CCT is stored as its reverse complement AGG
        assert graph.nodes["AGG"] == _adj("AGG", succs="T")
        assert graph_stats(graph) == {
            "nodes": 4,
            "adjacencies": 6,
            "branch_nodes": 1,
            "dead_ends": 3,
        }

    def test_every_interior_window_is_a_node(self):
        seq = unique_sequence(60)
        kmers = list(iter_kmers(seq, 9))
        graph = build_graph_from_kmers(kmers, 9)

        expected = set()
        for kmer in kmers:
            for window in (kmer[:-2], interior(kmer), kmer[2:]):
                expected.add(canonical(window))
        assert set(graph.nodes) == expected
        assert all(canonical(kmer) == kmer for kmer in graph.nodes)

    def test_invalid_kmer_length(self):
        graph = AdjacencyGraph(k=5)
        with pytest.raises(ValueError):
            add_kmer(graph, "ACGT")


class TestLookup:
    """Strand-sensitive lookup"""

    def test_lookup_flips_non_canonical(self):
        graph = build_graph_from_kmers(["AACCG"], 5)
        assert graph.lookup("ACC") == _adj("ACC", preds="A", succs="G")
        assert graph.lookup("GGT") == _adj("GGT", preds="C", succs="T")

    def test_missing_kmer_is_an_error(self):
        graph = build_graph_from_kmers(["AACCG"], 5)
        with pytest.raises(GraphConsistencyError):
            graph.lookup("TTT")
