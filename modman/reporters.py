# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Progress bars for long running operations."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from errno import EPIPE, ESHUTDOWN
from logging import getLogger

from .base.context import context

log = getLogger(__name__)


class ProgressBarBase(ABC):
    def __init__(self, description: str, **kwargs):
        self.description = description

    @abstractmethod
    def update_to(self, fraction) -> None: ...

    @abstractmethod
    def tick(self) -> None:
        """Advance an indeterminate bar by one step."""

    @abstractmethod
    def refresh(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    def finish(self):
        self.update_to(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


class QuietProgressBar(ProgressBarBase):
    """
    Progress bar class used when no output should be printed
    """

    def update_to(self, fraction) -> None:
        pass

    def tick(self) -> None:
        pass

    def refresh(self) -> None:
        pass

    def close(self) -> None:
        pass


class TQDMProgressBar(ProgressBarBase):
    """
    Progress bar class used for tqdm progress bars
    """

    def __init__(self, description: str, indeterminate=False, leave=True, **kwargs):
        super().__init__(description)

        self.enabled = True
        self.indeterminate = indeterminate

        if indeterminate:
            bar_format = "{desc} {elapsed} "
        else:
            bar_format = "{desc}{bar} | {percentage:3.0f}% "

        try:
            self.pbar = self._tqdm(
                desc=description,
                bar_format=bar_format,
                ascii=True,
                total=None if indeterminate else 1,
                file=sys.stdout,
                leave=leave,
            )
        except OSError as e:
            if e.errno in (EPIPE, ESHUTDOWN):
                self.enabled = False
            else:
                raise

    def update_to(self, fraction) -> None:
        try:
            if self.enabled and not self.indeterminate:
                self.pbar.update(fraction - self.pbar.n)
        except OSError as e:
            if e.errno in (EPIPE, ESHUTDOWN):
                self.enabled = False
            else:
                raise

    def tick(self) -> None:
        if self.enabled:
            self.pbar.update(1)

    def close(self) -> None:
        if self.enabled:
            try:
                self.pbar.close()
            except OSError as e:
                if e.errno not in (EPIPE, ESHUTDOWN):
                    raise
            self.enabled = False

    def refresh(self) -> None:
        if self.enabled:
            self.pbar.refresh()

    @staticmethod
    def _tqdm(*args, **kwargs):
        """Deferred import so it doesn't slow down commands that never show progress."""
        from tqdm.auto import tqdm

        return tqdm(*args, **kwargs)


def get_progress_bar(description: str, indeterminate=False, **kwargs) -> ProgressBarBase:
    if context.quiet or context.json:
        return QuietProgressBar(description)
    return TQDMProgressBar(description, indeterminate=indeterminate, **kwargs)
