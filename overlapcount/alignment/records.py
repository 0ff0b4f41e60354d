# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Alignment records read from BAM/SAM and the fragments built from them.

pysam reports 0-based half-open coordinates; records here are converted to
1-based inclusive coordinates to match the annotation.
"""

from dataclasses import dataclass
from typing import Optional

import pysam


@dataclass(frozen=True)
class AlignmentRecord:
    chrom: str
    start: int
    end: int
    strand: str
    mapq: int = 255
    paired: bool = False
    mate_present: bool = False
    is_primary: bool = True
    query_name: str = ''
    is_read1: bool = True
    mate_chrom: Optional[str] = None

    @classmethod
    def from_segment(cls, aln):
        """Convert a mapped ``pysam.AlignedSegment``."""
        _mate_present = aln.is_paired and not aln.mate_is_unmapped
        return cls(
            chrom=aln.reference_name,
            start=aln.reference_start + 1,
            end=aln.reference_end if aln.reference_end is not None else aln.reference_start,
            strand='-' if aln.is_reverse else '+',
            mapq=aln.mapping_quality,
            paired=aln.is_paired,
            mate_present=_mate_present,
            is_primary=not (aln.is_secondary or aln.is_supplementary),
            query_name=aln.query_name,
            is_read1=aln.is_read1 or not aln.is_paired,
            mate_chrom=aln.next_reference_name if _mate_present else None,
        )


@dataclass(frozen=True)
class Fragment:
    chrom: str
    start: int
    end: int
    strand: str
    query_name: str = ''

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def read_alignments(samfile, region=None, threads=1):
    """Yield an AlignmentRecord for every mapped alignment in a BAM/SAM file.

    Args:
        samfile: Path to the alignment file.
        region: Chromosome name to fetch. Requires an index. If None the
            whole file is streamed in file order.
        threads: Decompression threads passed to pysam.

    Yields:
        AlignmentRecord, skipping unmapped reads.
    """
    with pysam.AlignmentFile(samfile, check_sq=False, threads=threads) as sf:
        _iter = sf.fetch(region) if region is not None else sf.fetch(until_eof=True)
        for aln in _iter:
            if aln.is_unmapped:
                continue
            yield AlignmentRecord.from_segment(aln)


def has_index(samfile):
    with pysam.AlignmentFile(samfile, check_sq=False) as sf:
        return sf.has_index()


def reference_names(samfile):
    with pysam.AlignmentFile(samfile, check_sq=False) as sf:
        return list(sf.references)
