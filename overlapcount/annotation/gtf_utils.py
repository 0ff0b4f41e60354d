# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""GTF reading: exon rows to :class:`Exon` records."""

import gzip
import logging as lg
import re
from collections import namedtuple

from .models import AnnotationError, Exon

GTFRow = namedtuple('GTFRow', ['chrom', 'source', 'feature', 'start', 'end', 'score', 'strand', 'frame', 'attribute'])

_ATTR_RE = re.compile(r'(\w+)\s+"(.+?)";')


def parse_attributes(attribute):
    return dict(_ATTR_RE.findall(attribute))


def _open_gtf(gtf_path):
    if gtf_path.endswith('.gz'):
        return gzip.open(gtf_path, 'rt')
    return open(gtf_path)  # noqa: SIM115


def iter_exons(gtf_file, attribute_name='gene_id', feature_type='exon'):
    """Yield exons from a GTF file, tagged with the gene they belong to.

    Args:
        gtf_file: Path to a GTF file (optionally gzipped) or an open text
            file handle.
        attribute_name: GTF attribute whose value groups exons into genes.
        feature_type: Only rows with this value in the feature column are used.

    Yields:
        Exon records in file order.

    Raises:
        AnnotationError: A row does not have nine tab-separated columns or
            its coordinates are not valid integers.
    """
    _opened = isinstance(gtf_file, str)
    fh = _open_gtf(gtf_file) if _opened else gtf_file
    try:
        for rownum, line in enumerate(fh, start=1):
            if line.startswith('#') or not line.strip():
                continue
            fields = line.rstrip('\n').split('\t')
            if len(fields) != 9:
                raise AnnotationError(f'GTF line {rownum}: expected 9 columns, found {len(fields)}')
            f = GTFRow(*fields)
            if f.feature != feature_type:
                continue

            attr = parse_attributes(f.attribute)
            if attribute_name not in attr:
                lg.warning(f'Skipping row {rownum}: missing attribute "{attribute_name}"')
                continue

            try:
                start, end = int(f.start), int(f.end)
            except ValueError:
                raise AnnotationError(
                    f'GTF line {rownum}: coordinates are not integers ({f.start}, {f.end})'
                ) from None
            strand = f.strand if f.strand in ('+', '-') else '.'
            try:
                yield Exon(f.chrom, start, end, strand, attr[attribute_name])
            except AnnotationError as exc:
                raise AnnotationError(f'GTF line {rownum}: {exc}') from None
    finally:
        if _opened:
            fh.close()
