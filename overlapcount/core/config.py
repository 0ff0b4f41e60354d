# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Validated counting configuration."""

from dataclasses import dataclass

MODES = ('Union', 'IntersectionStrict', 'IntersectionNotEmpty')


class ConfigurationError(ValueError):
    """Invalid counting option, raised before any input is read."""


@dataclass(frozen=True)
class CountConfig:
    """Immutable counting options.

    Validated on construction so that a bad value fails before the
    annotation or alignments are touched.
    """
    mode: str = 'Union'
    single_end: bool = False
    stranded: bool = False
    count_fragments: bool = False
    mapq_filter: int = 0
    ncpu: int = 1

    def __post_init__(self):
        if self.mode not in MODES:
            raise ConfigurationError(
                f'The count mode has to be one of {", ".join(MODES)}. "{self.mode}" is not valid.'
            )
        for name in ('single_end', 'stranded', 'count_fragments'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f'{name} must be True or False, got {getattr(self, name)!r}')
        # bool is a subclass of int and is not a valid threshold
        if isinstance(self.mapq_filter, bool) or not isinstance(self.mapq_filter, int) or self.mapq_filter < 0:
            raise ConfigurationError(f'mapq_filter needs to be a non-negative integer, got {self.mapq_filter!r}')
        if isinstance(self.ncpu, bool) or not isinstance(self.ncpu, int) or self.ncpu < 1:
            raise ConfigurationError(f'ncpu needs to be a positive integer, got {self.ncpu!r}')

    @classmethod
    def from_opts(cls, opts):
        """Build from parsed ``count`` subcommand options."""
        return cls(
            mode=opts.mode,
            single_end=bool(opts.single),
            stranded=bool(opts.stranded),
            count_fragments=bool(opts.fragments),
            mapq_filter=opts.mapqFilter,
            ncpu=getattr(opts, 'ncpu', 1),
        )
