from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import NamedTuple
import json

from io_fastq import ExportError, ReadRecord, check_read_pairs, fastq_to_reads, write_fasta
from kmers import KmerSpectrum, filter_kmers, format_histogram, write_kmer_histogram
from dbg import AdjacencyGraph, build_graph_from_kmers, graph_stats, write_graph_stats
from traversal import Contig, ContigStrand, extract_contigs, contig_stats
from read_paths import PathInterval, format_pair_lines, path_read_pairs
from graph_export import write_dot, write_gfa


###############################
########### TYPES #############
###############################
class AssemblyResult(NamedTuple):
    spectrum: KmerSpectrum
    graph: AdjacencyGraph
    contigs: list[Contig]
    claims: dict[str, ContigStrand]
    read_paths: list[list[PathInterval]]


###############################
########## HELPERS  ###########
###############################
def validate_parameters(kmer_length: int, min_quality: int) -> None:
    if kmer_length < 3:
        raise ValueError("K-mer length must be >= 3")
    if kmer_length % 2 == 0:
        raise ValueError("K-mer length must be odd")
    if min_quality < 0:
        raise ValueError("min-quality must be >= 0")


def write_params_json(
    input: Path,
    output: Path,
    kmer_length: int,
    min_quality: int,
    min_kmer_count: int,
    used_min_kmer_count: int,
    path: Path,
) -> None:
    payload = {
        "timestamp": datetime.now().isoformat(timespec="seconds"),
        "input": str(input),
        "output": str(output),
        "kmer_length": kmer_length,
        "min_quality": min_quality,
        "min_kmer_count": min_kmer_count,
        "used_min_kmer_count": used_min_kmer_count,
    }
    try:
        with open(path, "w") as f:
            json.dump(payload, f, indent=2)
    except OSError as err:
        raise ExportError(f"Failed to write parameters: {path}") from err


def write_report(path: Path, lines: list[str]) -> None:
    try:
        with open(path, "w") as f:
            for line in lines:
                f.write(line.rstrip() + "\n")
    except OSError as err:
        raise ExportError(f"Failed to write report: {path}") from err


def artifact_paths(output: Path) -> dict[str, Path]:
    """All files of one run share the output base name"""
    return {
        "fasta": output.with_name(output.name + ".fasta"),
        "gfa": output.with_name(output.name + ".gfa"),
        "dot": output.with_name(output.name + ".dot"),
        "histogram": output.with_name(output.name + ".kmer_histogram.tsv"),
        "graph_stats": output.with_name(output.name + ".graph_stats.tsv"),
        "params": output.with_name(output.name + ".params.json"),
        "report": output.with_name(output.name + ".report.txt"),
    }


###############################
########## FUNCTIONS ##########
###############################
def assemble_reads(
    reads: list[ReadRecord],
    kmer_length: int = 39,
    min_quality: int = 7,
    min_kmer_count: int = 4,
    verbose: bool = False,
) -> AssemblyResult:
    """
    Run the in-memory part of the pipeline.

    Args:
        reads: interleaved mates, reads 2i and 2i+1 form pair i
        kmer_length: k (odd, >= 3); graph nodes are (k-2)-mers
        min_quality: calls below it are masked before counting
        min_kmer_count: trusted k-mer threshold, <= 0 detects it from the
            histogram

    Diagnostics (histogram, threshold, read pair paths) are always printed.
    """
    check_read_pairs(reads)
    validate_parameters(kmer_length, min_quality)

    # ---------- STEP 2: K-MERS ----------
    if verbose:
        print("[2/6] Counting k-mers...")
    spectrum = filter_kmers(
        reads, kmer_length, min_quality, min_kmer_count, verbose=verbose
    )
    for line in format_histogram(spectrum):
        print(line)

    # ---------- STEP 3: BUILD GRAPH ----------
    if verbose:
        print(f"[3/6] Building adjacency graph from {len(spectrum.trusted)} trusted k-mers...")
    graph = build_graph_from_kmers(spectrum.trusted, kmer_length, verbose=verbose)

    # ---------- STEP 4: TRAVERSAL TO CONTIGS ----------
    if verbose:
        print(f"[4/6] Extracting contigs from {len(graph)} nodes...")
    contigs, claims = extract_contigs(graph)

    # ---------- STEP 5: READ PATHS ----------
    if verbose:
        print(f"[5/6] Pathing {len(reads) // 2} read pairs over {len(contigs)} contigs...")
    read_paths = path_read_pairs(reads, contigs, graph.node_len, verbose=verbose)
    for line in format_pair_lines(read_paths, contigs):
        print(line)

    return AssemblyResult(spectrum, graph, contigs, claims, read_paths)


def run_assembly(
    input: Path,
    output: Path,
    kmer_length: int = 39,
    min_quality: int = 7,
    min_kmer_count: int = 4,
    verbose: bool = True,
) -> dict:
    """
    Run the whole pipeline from an interleaved FASTQ file.

    Args:
        input: interleaved paired-end FASTQ
        output: base name of the artifacts (<output>.fasta/.gfa/.dot, ...)
        kmer_length: k-mer length (default: 39)
        min_quality: minimum call quality (default: 7)
        min_kmer_count: minimum trusted k-mer count, <= 0 for auto (default: 4)
        verbose: print progress

    Returns:
        dict: Contig statistics including total_length, n50, longest, etc.
    """
    validate_parameters(kmer_length, min_quality)
    paths = artifact_paths(output)

    # ---------- STEP 1: READ FASTQ ----------
    if verbose:
        print("[1/6] Reading reads...")
    reads = fastq_to_reads(input)

    result = assemble_reads(
        reads,
        kmer_length=kmer_length,
        min_quality=min_quality,
        min_kmer_count=min_kmer_count,
        verbose=verbose,
    )
    stats = graph_stats(result.graph)
    sequences = [contig.sequence for contig in result.contigs]

    # ---------- STEP 6: WRITE OUTPUT ----------
    if verbose:
        print("[6/6] Writing output...")
    write_fasta(sequences, paths["fasta"])
    write_gfa(result.contigs, result.claims, paths["gfa"])
    write_dot(result.contigs, result.claims, paths["dot"])

    write_kmer_histogram(result.spectrum.histogram, paths["histogram"])
    write_graph_stats(stats, paths["graph_stats"])
    write_params_json(
        input, output, kmer_length, min_quality, min_kmer_count,
        result.spectrum.min_kmer_count, paths["params"],
    )

    contig_statistics = contig_stats(result.contigs)

    report_lines: list[str] = []
    report_lines.append("K-mer adjacency assembly report")
    report_lines.append(f"Input: {input}")
    report_lines.append(f"Output: {output}")
    report_lines.append(f"k: {kmer_length}")
    report_lines.append(f"min_quality: {min_quality}")
    report_lines.append(f"min_kmer_count: {result.spectrum.min_kmer_count}")
    report_lines.append("")
    report_lines.append(f"Reads loaded: {len(reads)} ({len(reads) // 2} pairs)")
    report_lines.append(f"Distinct k-mers (before filtering): {result.spectrum.n_distinct}")
    report_lines.append(f"Trusted k-mers: {len(result.spectrum.trusted)}")
    report_lines.append("")
    report_lines.append("Graph stats:")
    for key, value in stats.items():
        report_lines.append(f"  {key}: {value}")
    report_lines.append("")
    for stat, value in contig_statistics.items():
        report_lines.append(f"{stat}: {value}")
    write_report(paths["report"], report_lines)

    if verbose:
        print("\n" + "=" * 70)
        print("ASSEMBLY COMPLETE")
        print("=" * 70)
        print(f"Contigs: {contig_statistics['num_contigs']}")
        if sequences:
            print(f"Longest: {contig_statistics['longest']} bp")
            print(f"Total length: {contig_statistics['total_length']} bp")
            print(f"N50: {contig_statistics['n50']} bp")
        print(f"\nResults in: {paths['fasta'].parent}/")
        print("=" * 70)

    return contig_statistics
