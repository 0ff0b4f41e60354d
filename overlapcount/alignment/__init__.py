# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

from .fragments import FragmentAssembler  # noqa: F401
from .records import AlignmentRecord, Fragment, read_alignments  # noqa: F401
