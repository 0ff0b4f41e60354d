# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Tests for overlapcount.annotation: gene models, GTF reading and the index."""

import io

import pytest

from overlapcount.annotation import (
    AnnotationError,
    AnnotationIndex,
    Exon,
    Gene,
    GenomicInterval,
    build_genes,
    reduce_intervals,
)
from overlapcount.annotation.gtf_utils import iter_exons, parse_attributes


def gtf_line(chrom, start, end, strand, gene_id, feature='exon', extra=''):
    attr = f'gene_id "{gene_id}"; transcript_id "{gene_id}.1";{extra}'
    return '\t'.join([chrom, 'test', feature, str(start), str(end), '.', strand, '.', attr]) + '\n'


GTF_TEXT = (
    '#!genome-build test\n'
    + gtf_line('chr1', 100, 200, '+', 'GA')
    + gtf_line('chr1', 150, 300, '+', 'GA')
    + gtf_line('chr1', 100, 300, '+', 'GA', feature='transcript')
    + gtf_line('chr1', 1000, 1099, '-', 'GB')
    + gtf_line('chr2', 50, 80, '+', 'GC')
)


# =========================================================================
# Interval reduction
# =========================================================================

class TestReduceIntervals:
    def test_merges_overlapping(self):
        ivs = [GenomicInterval('chr1', 150, 300), GenomicInterval('chr1', 100, 200)]
        assert reduce_intervals(ivs) == (GenomicInterval('chr1', 100, 300),)

    def test_merges_abutting(self):
        ivs = [GenomicInterval('chr1', 100, 199), GenomicInterval('chr1', 200, 250)]
        assert reduce_intervals(ivs) == (GenomicInterval('chr1', 100, 250),)

    def test_keeps_gap_of_one_base(self):
        ivs = [GenomicInterval('chr1', 100, 198), GenomicInterval('chr1', 200, 250)]
        assert len(reduce_intervals(ivs)) == 2

    def test_contained_interval(self):
        ivs = [GenomicInterval('chr1', 100, 500), GenomicInterval('chr1', 200, 300)]
        assert reduce_intervals(ivs) == (GenomicInterval('chr1', 100, 500),)

    def test_idempotent(self):
        ivs = [
            GenomicInterval('chr1', 500, 600),
            GenomicInterval('chr1', 100, 200),
            GenomicInterval('chr1', 180, 260),
            GenomicInterval('chr1', 601, 700),
        ]
        once = reduce_intervals(ivs)
        assert reduce_intervals(once) == once

    def test_sorted_and_disjoint(self):
        ivs = [GenomicInterval('chr1', s, s + 40) for s in (900, 10, 35, 400, 420, 100)]
        reduced = reduce_intervals(ivs)
        for a, b in zip(reduced, reduced[1:]):
            assert a.end < b.start
        assert sum(iv.length for iv in reduced) <= sum(iv.length for iv in ivs)

    def test_empty(self):
        assert reduce_intervals([]) == ()


# =========================================================================
# Gene models
# =========================================================================

class TestGene:
    def test_lengths(self):
        g = Gene('G1', (Exon('chr1', 100, 200, '+', 'G1'), Exon('chr1', 150, 300, '+', 'G1'),
                        Exon('chr1', 1001, 1100, '+', 'G1')))
        assert g.reduced_exons == (GenomicInterval('chr1', 100, 300, '+'),
                                   GenomicInterval('chr1', 1001, 1100, '+'))
        assert g.effective_length_kb == pytest.approx(0.301)
        assert g.full_span == GenomicInterval('chr1', 100, 1100, '+')
        assert g.full_length_kb == pytest.approx(1.001)
        assert g.chrom == 'chr1'
        assert g.strand == '+'

    def test_single_exon(self):
        g = Gene('G1', (Exon('chr1', 1000, 1099, '+', 'G1'),))
        assert g.effective_length_kb == pytest.approx(0.1)
        assert g.full_length_kb == pytest.approx(0.1)

    def test_cross_chromosome_rejected(self):
        with pytest.raises(AnnotationError, match='more than one chromosome'):
            Gene('G1', (Exon('chr1', 1, 10, '+', 'G1'), Exon('chr2', 1, 10, '+', 'G1')))

    def test_no_exons_rejected(self):
        with pytest.raises(AnnotationError, match='no exons'):
            Gene('G1', ())

    def test_mixed_strand_is_unknown(self):
        g = Gene('G1', (Exon('chr1', 1, 10, '+', 'G1'), Exon('chr1', 50, 60, '-', 'G1')))
        assert g.strand == '.'

    def test_frozen(self):
        g = Gene('G1', (Exon('chr1', 1, 10, '+', 'G1'),))
        with pytest.raises(Exception):
            g.chrom = 'chr2'

    def test_inverted_interval_rejected(self):
        with pytest.raises(AnnotationError):
            GenomicInterval('chr1', 20, 10)


class TestBuildGenes:
    def test_groups_by_gene(self):
        exons = [
            Exon('chr1', 100, 200, '+', 'GA'),
            Exon('chr1', 500, 600, '-', 'GB'),
            Exon('chr1', 300, 400, '+', 'GA'),
        ]
        genes = build_genes(exons)
        assert list(genes) == ['GA', 'GB']
        assert len(genes['GA'].exons) == 2
        assert genes['GA'].exons[1].start == 300


# =========================================================================
# GTF reading
# =========================================================================

class TestGTF:
    def test_parse_attributes(self):
        attr = parse_attributes('gene_id "G1"; transcript_id "T1"; gene_name "ABC";')
        assert attr == {'gene_id': 'G1', 'transcript_id': 'T1', 'gene_name': 'ABC'}

    def test_iter_exons_from_handle(self):
        exons = list(iter_exons(io.StringIO(GTF_TEXT)))
        assert len(exons) == 4
        assert exons[0] == Exon('chr1', 100, 200, '+', 'GA')
        assert {e.gene_id for e in exons} == {'GA', 'GB', 'GC'}

    def test_iter_exons_from_path(self, tmp_path):
        path = tmp_path / 'annotation.gtf'
        path.write_text(GTF_TEXT)
        assert len(list(iter_exons(str(path)))) == 4

    def test_other_attribute(self):
        exons = list(iter_exons(io.StringIO(GTF_TEXT), attribute_name='transcript_id'))
        assert exons[0].gene_id == 'GA.1'

    def test_missing_attribute_skipped(self):
        text = GTF_TEXT + 'chr1\ttest\texon\t5\t10\t.\t+\t.\ttranscript_id "X";\n'
        exons = list(iter_exons(io.StringIO(text)))
        assert len(exons) == 4

    def test_wrong_column_count(self):
        with pytest.raises(AnnotationError, match='expected 9 columns'):
            list(iter_exons(io.StringIO('chr1\ttest\texon\t1\t10\n')))

    def test_non_integer_coordinates(self):
        with pytest.raises(AnnotationError, match='not integers'):
            list(iter_exons(io.StringIO(gtf_line('chr1', 'a', 10, '+', 'G1'))))

    def test_inverted_coordinates(self):
        with pytest.raises(AnnotationError, match='line 1'):
            list(iter_exons(io.StringIO(gtf_line('chr1', 50, 10, '+', 'G1'))))

    def test_unknown_strand(self):
        exons = list(iter_exons(io.StringIO(gtf_line('chr1', 1, 10, '.', 'G1'))))
        assert exons[0].strand == '.'


# =========================================================================
# Index
# =========================================================================

class TestAnnotationIndex:
    @pytest.fixture
    def annot(self):
        return AnnotationIndex.from_exons(iter_exons(io.StringIO(GTF_TEXT)))

    def test_genes(self, annot):
        assert len(annot) == 3
        assert 'GA' in annot
        assert annot.chroms == ['chr1', 'chr2']

    def test_from_gtf(self, tmp_path):
        path = tmp_path / 'annotation.gtf'
        path.write_text(GTF_TEXT)
        assert len(AnnotationIndex.from_gtf(str(path))) == 3

    def test_reduced_exons_in_tree(self, annot):
        # GA's two exons are stored as one merged interval
        ivs = [iv for iv in annot.itree['chr1'] if iv.data == 'GA']
        assert len(ivs) == 1
        assert (ivs[0].begin, ivs[0].end) == (100, 301)

    def test_overlap_inclusive_coordinates(self, annot):
        assert {iv.data for iv in annot.overlap('chr1', 300, 300)} == {'GA'}
        assert annot.overlap('chr1', 301, 999) == set()
        assert {iv.data for iv in annot.overlap('chr1', 250, 1000)} == {'GA', 'GB'}

    def test_overlap_unknown_chrom(self, annot):
        assert annot.overlap('chrX', 1, 100) == set()
        assert not annot.has_chrom('chrX')

    def test_genes_on(self, annot):
        assert [g.id for g in annot.genes_on('chr1')] == ['GA', 'GB']

    def test_subregion(self, annot):
        sub = annot.subregion(['chr2'])
        assert list(sub.genes) == ['GC']
        assert sub.chroms == ['chr2']
        assert not sub.has_chrom('chr1')
