# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""
Gateways isolate interaction of modman code with the outside world.  Disk manipulation,
archive codecs, and http requests are all examples.  Code in gateways should never
import from core, models or cli.
"""
