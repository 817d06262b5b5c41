#!/usr/bin/env python3

"""
Summary:
    Primitive operations on fixed-length DNA windows (k-mers).

Description:
    Windows are plain upper-case strings over A/C/G/T. Equality and hashing
    are the raw string ones, nothing is canonicalized implicitly: callers
    ask for canonical() explicitly where a strand-independent identity is
    needed.

    Example for the window ACGTT:
        reverse complement   AACGT
        canonical            AACGT   (sorts before ACGTT)
        interior             CGT
        successor(.., "A")   CGTTA
        predecessor(.., "G") GACGT
"""

###############################
########### IMPORTS  ##########
###############################
from Bio.Seq import reverse_complement as _bio_reverse_complement


BASES = "ACGT"


###############################
########## FUNCTIONS ##########
###############################
def reverse_complement(seq: str) -> str:
    return _bio_reverse_complement(seq)


def complement_base(base: str) -> str:
    return _bio_reverse_complement(base)


def canonical(kmer: str) -> str:
    """Return whichever of kmer and its reverse complement sorts first"""
    rc = reverse_complement(kmer)
    return kmer if kmer <= rc else rc


def is_canonical(kmer: str) -> bool:
    return kmer <= reverse_complement(kmer)


def first_base(kmer: str) -> str:
    return kmer[0]


def last_base(kmer: str) -> str:
    return kmer[-1]


def interior(kmer: str) -> str:
    """Drop the first and the last base (k -> k-2)"""
    return kmer[1:-1]


def successor(kmer: str, base: str) -> str:
    """Append base on the right and truncate the left end"""
    return kmer[1:] + base


def predecessor(kmer: str, base: str) -> str:
    """Prepend base on the left and truncate the right end"""
    return base + kmer[:-1]
