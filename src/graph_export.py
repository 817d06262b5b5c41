#!/usr/bin/env python3

"""
Summary:
    Write contigs and the links between them as GFA and Graphviz DOT.

Description:
    A link is read off a contig's terminal records: every predecessor kmer
    of its first record and every successor kmer of its last record is the
    terminal kmer of some contig strand, found through the claim map built
    by traversal.extract_contigs.

    Each logical link is seen from both of its contigs; it is only written
    from the contig with the smaller index.
"""

###############################
########### IMPORTS  ##########
###############################
from pathlib import Path

from dbg import GraphConsistencyError
from dna import reverse_complement
from io_fastq import ExportError
from traversal import Contig, ContigStrand


###############################
########## FUNCTIONS ##########
###############################
def _claimed(claims: dict[str, ContigStrand], kmer: str) -> ContigStrand:
    try:
        return claims[kmer]
    except KeyError:
        raise GraphConsistencyError(
            f"neighbouring kmer {kmer} does not belong to any contig"
        ) from None


def predecessor_contigs(
    contig: Contig, claims: dict[str, ContigStrand]
) -> list[ContigStrand]:
    """
    Contig strands entered when leaving the contig through its start, i.e.
    walking the reverse strand past the first kmer.
    """
    found = [
        _claimed(claims, reverse_complement(kmer))
        for kmer in contig.first.predecessor_kmers()
    ]
    return list(dict.fromkeys(found))


def successor_contigs(
    contig: Contig, claims: dict[str, ContigStrand]
) -> list[ContigStrand]:
    """Contig strands entered when leaving the contig through its end"""
    found = [_claimed(claims, kmer) for kmer in contig.last.successor_kmers()]
    return list(dict.fromkeys(found))


def gfa_lines(contigs: list[Contig], claims: dict[str, ContigStrand]) -> list[str]:
    lines = []
    for contig_id, contig in enumerate(contigs):
        seq = contig.sequence
        lines.append(f"S\ttig{contig_id}\t{seq}\tLN:i:{len(seq)}")

        # strictly greater: a circular self link is written from the end side
        for target in predecessor_contigs(contig, claims):
            if target.contig > contig_id:
                lines.append(
                    f"L\ttig{contig_id}\t-\ttig{target.contig}\t{target.strand.value}"
                )
        for target in successor_contigs(contig, claims):
            if target.contig >= contig_id:
                lines.append(
                    f"L\ttig{contig_id}\t+\ttig{target.contig}\t{target.strand.value}"
                )
    return lines


def _dot_node(contig_id: int, reverse: bool) -> str:
    return f"tig{contig_id}RC" if reverse else f"tig{contig_id}"


def dot_lines(contigs: list[Contig], claims: dict[str, ContigStrand]) -> list[str]:
    """
    Two nodes per contig (forward and RC) and, per link, the arc plus its
    mirror image on the opposite strands.
    """
    lines = ["digraph {"]
    for contig_id, contig in enumerate(contigs):
        width = len(contig.sequence) / 100.0
        lines.append(f"tig{contig_id} [width={width}]")
        lines.append(f"tig{contig_id}RC [width={width}]")

    for contig_id, contig in enumerate(contigs):
        for target in predecessor_contigs(contig, claims):
            if target.contig < contig_id:
                continue
            lines.append(
                f"{_dot_node(contig_id, True)} -> {_dot_node(target.contig, target.is_reverse)}"
            )
            if target.contig != contig_id:
                lines.append(
                    f"{_dot_node(target.contig, not target.is_reverse)} -> {_dot_node(contig_id, False)}"
                )
        for target in successor_contigs(contig, claims):
            if target.contig < contig_id:
                continue
            lines.append(
                f"{_dot_node(contig_id, False)} -> {_dot_node(target.contig, target.is_reverse)}"
            )
            if target.contig != contig_id:
                lines.append(
                    f"{_dot_node(target.contig, not target.is_reverse)} -> {_dot_node(contig_id, True)}"
                )
    lines.append("}")
    return lines


def _write_lines(lines: list[str], path: Path, what: str) -> None:
    try:
        with open(path, "w") as handle:
            for line in lines:
                handle.write(line + "\n")
    except OSError as err:
        raise ExportError(f"Failed to write assembly {what} file: {path}") from err


def write_gfa(
    contigs: list[Contig], claims: dict[str, ContigStrand], path: Path
) -> None:
    _write_lines(gfa_lines(contigs, claims), path, "GFA")


def write_dot(
    contigs: list[Contig], claims: dict[str, ContigStrand], path: Path
) -> None:
    _write_lines(dot_lines(contigs, claims), path, "DOT")
