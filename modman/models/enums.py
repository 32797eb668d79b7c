# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
from enum import Enum


class PackageState(Enum):
    unknown = "unknown"
    available = "available"
    installed = "installed"

    def __str__(self):
        return self.value

    def __json__(self):
        return self.value


class PackageSource(Enum):
    """Where a package record was learned from."""

    installed = "installed"
    repository = "repository"
    archive = "archive"

    def __str__(self):
        return self.value

    def __json__(self):
        return self.value


class Transition(Enum):
    install = "install"
    uninstall = "uninstall"
    enable = "enable"
    disable = "disable"

    def __str__(self):
        return self.value
