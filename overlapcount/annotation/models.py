# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Frozen value types for gene models.

Coordinates are 1-based and inclusive on both ends, as in GTF.
"""

from dataclasses import dataclass, field

STRANDS = ('+', '-', '.')


class AnnotationError(ValueError):
    """Malformed or inconsistent gene annotation."""


@dataclass(frozen=True)
class GenomicInterval:
    chrom: str
    start: int
    end: int
    strand: str = '.'

    def __post_init__(self):
        if self.start > self.end:
            raise AnnotationError(
                f'Interval start {self.start} is after end {self.end} on {self.chrom}'
            )
        if self.strand not in STRANDS:
            raise AnnotationError(f'Unknown strand "{self.strand}"')

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class Exon(GenomicInterval):
    gene_id: str = ''


def reduce_intervals(intervals):
    """Merge overlapping or abutting intervals.

    Args:
        intervals: Iterable of GenomicInterval, all on one chromosome.

    Returns:
        Tuple of disjoint GenomicInterval sorted by start. Adjacent results
        are separated by at least one uncovered base.
    """
    ret = []
    for iv in sorted(intervals, key=lambda x: (x.start, x.end)):
        if ret and iv.start <= ret[-1].end + 1:
            last = ret[-1]
            strand = last.strand if last.strand == iv.strand else '.'
            ret[-1] = GenomicInterval(last.chrom, last.start, max(last.end, iv.end), strand)
        else:
            ret.append(GenomicInterval(iv.chrom, iv.start, iv.end, iv.strand))
    return tuple(ret)


@dataclass(frozen=True)
class Gene:
    """A gene model built from its exons.

    Only ``id`` and ``exons`` are supplied; everything else is derived in
    ``__post_init__`` and the instance is read-only afterwards.
    """
    id: str
    exons: tuple
    chrom: str = field(init=False)
    strand: str = field(init=False)
    reduced_exons: tuple = field(init=False)
    full_span: GenomicInterval = field(init=False)
    effective_length_kb: float = field(init=False)
    full_length_kb: float = field(init=False)

    def __post_init__(self):
        if not self.exons:
            raise AnnotationError(f'Gene "{self.id}" has no exons')
        chroms = {e.chrom for e in self.exons}
        if len(chroms) > 1:
            raise AnnotationError(
                f'Gene "{self.id}" has exons on more than one chromosome: {", ".join(sorted(chroms))}'
            )
        strands = {e.strand for e in self.exons}
        _strand = strands.pop() if len(strands) == 1 else '.'
        _chrom = chroms.pop()

        reduced = reduce_intervals(self.exons)
        span = GenomicInterval(
            _chrom,
            min(e.start for e in self.exons),
            max(e.end for e in self.exons),
            _strand,
        )
        # frozen dataclass: derived fields are set through object.__setattr__
        object.__setattr__(self, 'chrom', _chrom)
        object.__setattr__(self, 'strand', _strand)
        object.__setattr__(self, 'reduced_exons', reduced)
        object.__setattr__(self, 'full_span', span)
        object.__setattr__(self, 'effective_length_kb', sum(iv.length for iv in reduced) / 1000)
        object.__setattr__(self, 'full_length_kb', span.length / 1000)
