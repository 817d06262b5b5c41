#!/usr/bin/env python3

"""
Summary:
Read interleaved paired-end FASTQ files and write contigs as FASTA.

Input:
    FASTQ file where records 2i and 2i+1 are mates of one fragment

Output:
    list of ReadRecord (name, bases, phred qualities)
    FASTA file with one record per contig, header = 0-based contig index
"""

###############################
########### IMPORTS  ##########
###############################
from Bio import SeqIO
from pathlib import Path
from typing import NamedTuple


###############################
########## EXCEPTIONS #########
###############################
class ReadPairingError(ValueError):
    """Interleaved input does not consist of complete mate pairs."""


class ExportError(OSError):
    """An output artifact could not be created or written."""


###############################
########### TYPES #############
###############################
class ReadRecord(NamedTuple):
    name: str
    bases: str
    quals: list[int]


###############################
########## FUNCTIONS ##########
###############################
def normalize_sequences(seq: str) -> str:
    """Make all nucleotides upper case and remove blank characters"""
    return seq.upper().strip()


def check_read_pairs(reads: list[ReadRecord]) -> None:
    if len(reads) % 2 != 0:
        raise ReadPairingError(
            "FASTQ input must be interleaved pairs, "
            f"but there are an odd number of reads ({len(reads)})."
        )


def fastq_to_reads(path: Path) -> list[ReadRecord]:
    """
    Read an interleaved FASTQ file and return its reads in file order.

    Raises ReadPairingError when the number of records is odd.
    """
    reads: list[ReadRecord] = []

    for seq_record in SeqIO.parse(path, "fastq"):
        reads.append(
            ReadRecord(
                name=seq_record.id,
                bases=normalize_sequences(str(seq_record.seq)),
                quals=list(seq_record.letter_annotations["phred_quality"]),
            )
        )

    if not reads:
        raise ValueError(f"No reads found in FASTQ file: {path}")

    check_read_pairs(reads)
    return reads


def write_fasta(seqs: list[str], path: Path) -> None:
    try:
        with open(path, "w") as handle:
            for i, seq in enumerate(seqs):
                handle.write(f">{i}\n")
                handle.write(seq + "\n")
    except OSError as err:
        raise ExportError(f"Failed to write assembly FASTA file: {path}") from err
