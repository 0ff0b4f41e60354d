# This file is part of Overlapcount.
# Original Telescope code by Matthew L. Bendall (https://github.com/mlbendall/telescope)
#
# New code and modifications by Duane Storey (https://github.com/duanestorey) and Claude (Anthropic).
# Licensed under MIT License.


def format_minutes(seconds):
    mins = seconds // 60
    secs = seconds - (mins * 60)
    return "%d minutes and %d secs" % (mins, secs)
