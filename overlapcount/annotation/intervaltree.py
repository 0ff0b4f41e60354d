# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

import logging as lg
from collections import OrderedDict, defaultdict

from intervaltree import Interval, IntervalTree

from .gtf_utils import iter_exons
from .models import Gene


def build_genes(exons):
    """Group exons by gene and build the gene models.

    Args:
        exons: Iterable of Exon.

    Returns:
        OrderedDict of gene_id -> Gene, in order of first appearance.

    Raises:
        AnnotationError: A gene's exons lie on more than one chromosome.
    """
    grouped = OrderedDict()
    for exon in exons:
        grouped.setdefault(exon.gene_id, []).append(exon)
    return OrderedDict((gene_id, Gene(gene_id, tuple(_exons))) for gene_id, _exons in grouped.items())


class AnnotationIndex:
    """Gene models plus a per-chromosome interval tree of reduced exons.

    Tree intervals are half-open, ``Interval(start, end + 1, gene_id)``, so a
    1-based inclusive fragment ``[s, e]`` is queried as ``overlap(s, e + 1)``.
    The index is read-only once built and may be shared between workers.
    """

    def __init__(self, genes):
        self.genes = OrderedDict(genes)
        self.itree = defaultdict(IntervalTree)
        for gene in self.genes.values():
            for iv in gene.reduced_exons:
                self.itree[gene.chrom].add(Interval(iv.start, iv.end + 1, gene.id))
        lg.debug(f'Indexed {len(self.genes)} genes on {len(self.itree)} chromosomes')

    @classmethod
    def from_exons(cls, exons):
        return cls(build_genes(exons))

    @classmethod
    def from_gtf(cls, gtf_file, attribute_name='gene_id'):
        return cls.from_exons(iter_exons(gtf_file, attribute_name))

    def __len__(self):
        return len(self.genes)

    def __contains__(self, gene_id):
        return gene_id in self.genes

    @property
    def chroms(self):
        return sorted(self.itree.keys())

    def has_chrom(self, chrom):
        return chrom in self.itree

    def genes_on(self, chrom):
        return [g for g in self.genes.values() if g.chrom == chrom]

    def overlap(self, chrom, start, end):
        """Reduced-exon intervals overlapping the inclusive range ``[start, end]``."""
        if chrom not in self.itree:
            return set()
        return self.itree[chrom].overlap(start, end + 1)

    def subregion(self, chroms):
        """Index restricted to the genes on ``chroms``."""
        return type(self)((g.id, g) for chrom in sorted(set(chroms)) for g in self.genes_on(chrom))
