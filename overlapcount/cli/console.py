# -*- coding: utf-8 -*-

# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.

"""Human-readable progress on stdout.

Diagnostics go through ``logging`` on stderr; the Console only prints the
banner, the run inputs, progress lines and the timing table.
"""

import sys
from time import perf_counter


class Stopwatch:
    """Named, back-to-back timing stages of one run."""

    def __init__(self):
        self._timings = []
        self._first = None
        self._current = None

    def start(self, name):
        """Start stage ``name``, ending the running stage if any."""
        now = perf_counter()
        self._close(now)
        self._current = (name, now)
        if self._first is None:
            self._first = now

    def stop(self):
        self._close(perf_counter())

    def _close(self, now):
        if self._current is not None:
            name, began = self._current
            self._timings.append((name, now - began))
            self._current = None

    @property
    def total(self):
        return perf_counter() - self._first if self._first is not None else 0.0

    @property
    def timings(self):
        return list(self._timings)


class Console:
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3

    def __init__(self, level=NORMAL, stream=None):
        self.level = level
        self.stream = stream or sys.stdout
        self._use_color = hasattr(self.stream, 'isatty') and self.stream.isatty()

    @property
    def dash(self):
        """Separator for inline text; plain ASCII unless writing to a terminal."""
        return ' \u2014 ' if self._use_color else ' -- '

    def banner(self, version):
        if self._muted():
            return
        title = f'Overlapcount v{version}'
        if self._use_color:
            title = f'\033[1m{title}\033[0m'
        self._write('')
        self._write(title + self.dash + 'Gene Expression from Read Overlaps')
        self._write('')

    def section(self, title):
        if not self._muted():
            self._write(f'  {title}')

    def item(self, label, value):
        if not self._muted():
            self._write('    {:<14}{}'.format(label + ':', value))

    def status(self, message):
        if not self._muted():
            self._write(f'  {message}')

    def detail(self, message):
        if not self._muted():
            self._write(f'    {message}')

    def blank(self):
        if not self._muted():
            self._write('')

    def timing_table(self, stopwatch):
        """Per-stage wall time and share of the total."""
        timings = stopwatch.timings
        if self._muted() or not timings:
            return
        total = stopwatch.total
        self.section('Timing')
        for name, elapsed in timings:
            pct = '{:>4.0f}%'.format(100 * elapsed / total) if total > 0 else ''
            self._write('    {:<18}{:>5.1f}s{:>8}'.format(name, elapsed, pct))
        self._write('    ' + '\u2500' * 30)
        self._write('    {:<18}{:>5.1f}s'.format('Total', total))

    def _muted(self):
        return self.level < self.NORMAL

    def _write(self, text):
        print(text, file=self.stream)
