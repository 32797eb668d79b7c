# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Sentinels and constants shared by the common and gateway layers."""

from frozendict import frozendict

EMPTY_MAP = frozendict()

#: log level below DEBUG, used for per-file disk and archive chatter
TRACE = 5


class _Null:
    """Falsy, empty marker for "not given".

    >>> bool(NULL), len(NULL)
    (False, 0)
    """

    __slots__ = ()

    def __bool__(self):
        return False

    def __len__(self):
        return 0

    def __repr__(self):
        return "NULL"


# argparse defaults and manifest lookups use NULL where None is a meaningful value
NULL = _Null()
