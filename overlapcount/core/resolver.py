# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Assign fragments to at most one gene.

Three modes decide what happens when a fragment touches gene exons:

``Union``
    The fragment is counted if it overlaps the exons of exactly one gene.
``IntersectionStrict``
    The fragment is counted if every base lies inside the exons of exactly
    one gene.
``IntersectionNotEmpty``
    Positions covered by more than one overlapping gene are ignored; the
    fragment is counted if what is left overlaps exactly one gene.

Anything else is unassigned, reported as ``NO_FEATURE`` or ``AMBIGUOUS``.
"""

from collections import defaultdict

from intervaltree import IntervalTree

from .config import MODES, ConfigurationError

NO_FEATURE = '__no_feature'
AMBIGUOUS = '__ambiguous'


def strand_match(feature_strand, frag_strand):
    if feature_strand == '.' or frag_strand == '.':
        return True
    return feature_strand == frag_strand


def _pick_one(gene_ids):
    if len(gene_ids) == 1:
        return next(iter(gene_ids))
    return NO_FEATURE if not gene_ids else AMBIGUOUS


class OverlapResolver:
    """Resolve each fragment against an AnnotationIndex.

    Args:
        annotation: AnnotationIndex.
        mode: One of ``MODES``.
        stranded: Only consider genes on the fragment's strand.
    """

    def __init__(self, annotation, mode='Union', stranded=False):
        if mode not in MODES:
            raise ConfigurationError(f'Unknown overlap mode: {mode}')
        self.annotation = annotation
        self.mode = mode
        self.stranded = stranded
        self.resolve = self.resolve_func()

    def footprints(self, frag):
        """Overlapping genes and their exon blocks clipped to the fragment.

        Returns:
            dict of gene_id -> list of half-open (begin, end) tuples.
        """
        q_begin, q_end = frag.start, frag.end + 1
        _genes = self.annotation.genes
        ret = defaultdict(list)
        for iv in self.annotation.overlap(frag.chrom, frag.start, frag.end):
            if self.stranded and not strand_match(_genes[iv.data].strand, frag.strand):
                continue
            ret[iv.data].append((max(iv.begin, q_begin), min(iv.end, q_end)))
        return ret

    def resolve_func(self):
        def _resolve_union(frag):
            return _pick_one(self.footprints(frag))

        def _resolve_intersection_strict(frag):
            feats = self.footprints(frag)
            # reduced exons are disjoint so clipped lengths add up to coverage
            covering = [gid for gid, blocks in feats.items() if sum(e - b for b, e in blocks) == frag.length]
            return _pick_one(covering)

        def _resolve_intersection_not_empty(frag):
            feats = self.footprints(frag)
            if len(feats) <= 1:
                return _pick_one(feats)
            survivors = []
            for gid, blocks in feats.items():
                own = IntervalTree.from_tuples(blocks)
                for other, other_blocks in feats.items():
                    if other == gid:
                        continue
                    for b, e in other_blocks:
                        own.chop(b, e)
                if own:
                    survivors.append(gid)
            return _pick_one(survivors)

        if self.mode == 'Union':
            return _resolve_union
        elif self.mode == 'IntersectionStrict':
            return _resolve_intersection_strict
        elif self.mode == 'IntersectionNotEmpty':
            return _resolve_intersection_not_empty
        else:
            raise AssertionError(f'Unknown overlap mode: {self.mode}')
