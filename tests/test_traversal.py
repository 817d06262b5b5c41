"""
Tests for contig extraction.
"""

from conftest import unique_sequence

from dbg import build_graph_from_kmers
from dna import reverse_complement
from graph_export import gfa_lines
from kmers import iter_kmers
from traversal import (
    Contig,
    ContigStrand,
    Strand,
    contig_stats,
    extract_contigs,
    is_contig_end,
    is_contig_start,
)


def _graph_from_sequences(seqs, k):
    kmers = [kmer for seq in seqs for kmer in iter_kmers(seq, k)]
    return build_graph_from_kmers(kmers, k)


def _check_claims(graph, contigs, claims):
    """Every node in exactly one contig, in exactly one orientation"""
    seen = {}
    for contig_id, contig in enumerate(contigs):
        for kmer in iter_kmers(contig.sequence, graph.node_len):
            assert claims[kmer] == ContigStrand(contig_id, Strand.FORWARD)
            assert claims[reverse_complement(kmer)] == ContigStrand(
                contig_id, Strand.REVERSE
            )
            assert kmer not in seen
            seen[kmer] = contig_id
            seen[reverse_complement(kmer)] = contig_id

    expected = set(graph.nodes) | {reverse_complement(k) for k in graph.nodes}
    assert set(seen) == expected == set(claims)


class TestContigEnds:
    """Branch detection on both sides"""

    def test_start_and_end(self, fork_kmers):
        graph = build_graph_from_kmers(fork_kmers, 5)

        assert is_contig_start(graph.lookup("AAC"), graph)
        assert not is_contig_start(graph.lookup("ACC"), graph)
        assert is_contig_start(graph.lookup("CCG"), graph)
        assert is_contig_end(graph.lookup("ACC"), graph)
        assert not is_contig_end(graph.lookup("AAC"), graph)


class TestExtractContigs:
    """Maximal unbranched paths"""

    def test_linear_kmer(self):
        graph = build_graph_from_kmers(["AACCG"], 5)
        contigs, claims = extract_contigs(graph)

        assert [c.sequence for c in contigs] == ["AACCG"]
        assert contigs[0].first.kmer == "AAC"
        assert contigs[0].last.kmer == "CCG"
        assert claims["CGG"] == ContigStrand(0, Strand.REVERSE)

    def test_fork(self, fork_kmers):
        graph = build_graph_from_kmers(fork_kmers, 5)
        contigs, claims = extract_contigs(graph)

        assert [c.sequence for c in contigs] == ["AACC", "AGG", "CCG"]
        _check_claims(graph, contigs, claims)

    def test_numbering_is_reproducible(self, fork_kmers):
        first, _ = extract_contigs(build_graph_from_kmers(fork_kmers, 5))
        second, _ = extract_contigs(build_graph_from_kmers(fork_kmers[::-1], 5))
        assert [c.sequence for c in first] == [c.sequence for c in second]

    def test_unbranched_sequence_is_one_contig(self):
        seq = unique_sequence(80)
        graph = _graph_from_sequences([seq], 9)
        contigs, claims = extract_contigs(graph)

        assert len(contigs) == 1
        assert contigs[0].sequence in (seq, reverse_complement(seq))
        _check_claims(graph, contigs, claims)

    def test_shared_middle_splits_contigs(self):
        seq = unique_sequence(160)
        middle = seq[30:60]
        reads = [seq[0:90], seq[90:120] + middle + seq[120:150]]
        graph = _graph_from_sequences(reads, 9)
        contigs, claims = extract_contigs(graph)

        assert len(contigs) >= 3
        _check_claims(graph, contigs, claims)

    def test_contig_body_has_no_branch(self):
        seq = unique_sequence(160)
        reads = [seq[0:90], seq[90:120] + seq[30:60] + seq[120:150]]
        graph = _graph_from_sequences(reads, 9)
        contigs, claims = extract_contigs(graph)

        for contig_id, contig in enumerate(contigs):
            owners = {
                claims[kmer].contig
                for kmer in iter_kmers(contig.sequence, graph.node_len)
            }
            assert owners == {contig_id}

    def test_cycle_becomes_one_contig(self):
        # circular AAGC: every 3-mer has exactly one neighbour per side
        graph = _graph_from_sequences(["AAGCAAGC"], 5)
        contigs, claims = extract_contigs(graph)

        assert [c.sequence for c in contigs] == ["AAGCAA"]
        _check_claims(graph, contigs, claims)

    def test_hairpin_stops_at_fold(self):
        # AAGCTT is its own reverse complement: the walk reaches GCT, the
        # other strand of AGC, and stops there
        graph = _graph_from_sequences(["AAGCTT"], 5)
        contigs, claims = extract_contigs(graph)

        assert [c.sequence for c in contigs] == ["AAGC"]
        assert claims["GCT"] == ContigStrand(0, Strand.REVERSE)
        _check_claims(graph, contigs, claims)
        assert "L\ttig0\t+\ttig0\t-" in gfa_lines(contigs, claims)


class TestContigStats:
    def test_stats(self):
        contigs = [Contig(base * n, None, None) for base, n in [("A", 10), ("C", 30), ("G", 60)]]
        stats = contig_stats(contigs)
        assert stats["num_contigs"] == 3
        assert stats["total_length"] == 100
        assert stats["n50"] == 60
        assert stats["shortest"] == 10
        assert stats["mean_length"] == 33.3

    def test_empty(self):
        assert contig_stats([])["num_contigs"] == 0
