# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Platform flags and small type predicates; stdlib only."""

import sys
from collections.abc import Iterable

on_win = sys.platform == "win32"


def isiterable(obj):
    """True for non-string iterables."""
    return isinstance(obj, Iterable) and not isinstance(obj, (str, bytes))
