"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path

import pytest

from dna import reverse_complement
from io_fastq import ReadRecord


def make_read(name: str, bases: str, qual: int = 40) -> ReadRecord:
    return ReadRecord(name=name, bases=bases, quals=[qual] * len(bases))


def unique_sequence(length: int, kmer_len: int = 7, start: str = "ACCGATG") -> str:
    """
    Sequence in which no kmer_len-mer occurs twice, counting both strands,
    so its adjacency graph is one unbranched path.
    """
    seq = start[:kmer_len]
    seen = {seq, reverse_complement(seq)}
    while len(seq) < length:
        for base in "ACGT":
            window = (seq + base)[-kmer_len:]
            if window not in seen and reverse_complement(window) not in seen:
                seen.update((window, reverse_complement(window)))
                seq += base
                break
        else:
            raise RuntimeError(f"cannot extend unique sequence past {len(seq)}")
    return seq


def write_fastq(reads: list[ReadRecord], path: Path) -> Path:
    with open(path, "w") as handle:
        for read in reads:
            quals = "".join(chr(q + 33) for q in read.quals)
            handle.write(f"@{read.name}\n{read.bases}\n+\n{quals}\n")
    return path


@pytest.fixture
def fragment_pair():
    """One 50 bp fragment sequenced from both ends: mate2 = reverse complement"""
    fragment = unique_sequence(50)
    return fragment, [
        make_read("frag/1", fragment),
        make_read("frag/2", reverse_complement(fragment)),
    ]


@pytest.fixture
def fork_kmers():
    """Two trusted 5-mers that share ACC and fork into CCG / CCT"""
    return ["AACCG", "AACCT"]
