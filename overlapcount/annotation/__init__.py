# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Gene annotation: GTF reading, gene models and the overlap index."""

from .intervaltree import AnnotationIndex, build_genes  # noqa: F401
from .models import AnnotationError, Exon, Gene, GenomicInterval, reduce_intervals  # noqa: F401
