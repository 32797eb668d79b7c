# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Modman exceptions."""

from __future__ import annotations

from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from . import ModmanError
from .common.serialize import JSONDecodeError

if TYPE_CHECKING:
    from requests.models import Response

log = getLogger(__name__)


class OfflineError(ModmanError, RuntimeError):
    def __init__(self, message):
        super().__init__(message)


class OperationInProgressError(ModmanError, RuntimeError):
    def __init__(self, operation, package_name):
        message = (
            "Cannot start '%(operation)s' for %(package_name)s while another "
            "operation is in progress"
        )
        super().__init__(message, operation=operation, package_name=package_name)


# ----------------------------------------------------------------------------
# validation rejections: no side effect was performed, the operation is retryable


class TransitionRejected(ModmanError):
    """A package state transition refused by the dependency validator."""

    def __init__(self, package_name, message, **kwargs):
        self.package_name = package_name
        super().__init__(message, **kwargs)


class SubmodOperationError(TransitionRejected):
    def __init__(self, package_name, operation):
        super().__init__(package_name, f"Can not {operation} submod")


class PackageStateError(TransitionRejected):
    pass


class PackageNotAvailableError(TransitionRejected):
    def __init__(self, package_name):
        super().__init__(package_name, "Mod is not available")


class IncompatiblePackageError(TransitionRejected):
    def __init__(self, package_name):
        super().__init__(
            package_name,
            "Mod is not compatible, please update VCMI and checkout latest mod revisions",
        )


class MissingDependencyError(TransitionRejected):
    def __init__(self, package_name, dependency):
        self.dependency = dependency
        super().__init__(
            package_name, "Required mod %(dependency)s is missing", dependency=dependency
        )


class DisabledDependencyError(TransitionRejected):
    def __init__(self, package_name, dependency):
        self.dependency = dependency
        super().__init__(
            package_name,
            "Required mod %(dependency)s is not enabled",
            dependency=dependency,
        )


class PackageConflictError(TransitionRejected):
    def __init__(self, package_name, conflicting):
        self.conflicting = conflicting
        super().__init__(
            package_name, "This mod conflicts with %(conflicting)s", conflicting=conflicting
        )


class RequiredByDependentError(TransitionRejected):
    def __init__(self, package_name, dependent):
        self.dependent = dependent
        super().__init__(
            package_name, "This mod is needed to run %(dependent)s", dependent=dependent
        )


# ----------------------------------------------------------------------------
# i/o failures: partial state is cleaned up on a best-effort basis


class ModmanIOError(ModmanError, OSError):
    def __init__(self, message, *args, **kwargs):
        super().__init__(message, *args, **kwargs)


class ArchiveNotFoundError(ModmanIOError):
    def __init__(self, archive_path):
        self.archive_path = archive_path
        super().__init__("Mod archive is missing", archive_path=archive_path)


class PackageExistsError(ModmanIOError):
    def __init__(self, target_path):
        self.target_path = target_path
        super().__init__(
            "Mod with such name is already installed", target_path=target_path
        )


class CorruptedArchiveError(ModmanIOError):
    def __init__(self, archive_path, reason=None):
        self.archive_path = archive_path
        self.reason = reason
        super().__init__(
            "Mod archive is invalid or corrupted", archive_path=archive_path
        )


class UnsafeArchiveEntryError(CorruptedArchiveError):
    def __init__(self, archive_path, entry):
        self.entry = entry
        super().__init__(archive_path, reason=f"unsafe entry path '{entry}'")


class ExtractionError(ModmanIOError):
    def __init__(self, archive_path, caused_by=None):
        self.archive_path = archive_path
        super().__init__(
            "Failed to extract mod data", caused_by=caused_by, archive_path=archive_path
        )


class PackageNotDiscoveredError(ModmanIOError):
    def __init__(self, package_name, extracted_path):
        self.extracted_path = extracted_path
        super().__init__(
            "Mod data was extracted to %(extracted_path)s but no mod was found there",
            package_name=package_name,
            extracted_path=extracted_path,
        )


class PackageDataNotFoundError(ModmanIOError):
    def __init__(self, package_name):
        super().__init__("Data with this mod was not found", package_name=package_name)


class SettingsSaveError(ModmanIOError):
    def __init__(self, settings_file, caused_by=None):
        super().__init__(
            "Failed to save mod settings to %(settings_file)s",
            caused_by=caused_by,
            settings_file=settings_file,
        )


class ModmanHTTPError(ModmanIOError):
    def __init__(
        self,
        message,
        url,
        status_code,
        reason,
        elapsed_time,
        response: Response | None = None,
        caused_by=None,
    ):
        # if response includes a valid json body we prefer the reason/message defined there
        try:
            body = response.json()
        except (AttributeError, JSONDecodeError, ValueError):
            body = {}
        else:
            if isinstance(body, dict):
                reason = body.get("reason", None) or reason
                message = body.get("message", None) or message
            else:
                body = {}

        status_code = status_code or "000"
        reason = reason or "CONNECTION FAILED"
        if isinstance(reason, str):
            reason = reason.upper()
        elapsed_time = elapsed_time or "-"
        if isinstance(elapsed_time, timedelta):
            elapsed_time = str(elapsed_time).split(":", 1)[-1]

        super().__init__(
            "HTTP %(status_code)s %(reason)s for url <%(url)s>\nElapsed: %(elapsed_time)s\n\n"
            # message may contain '%' characters of its own
            + message.replace("%", "%%"),
            url=url,
            status_code=status_code,
            reason=reason,
            elapsed_time=elapsed_time,
            json=body,
            caused_by=caused_by,
        )


class ModmanSSLError(ModmanError):
    pass


# ----------------------------------------------------------------------------
# safety guard refusal: never retried automatically


class UnsafeRemovalError(ModmanError):
    def __init__(self, path):
        self.path = path
        super().__init__(
            "Mod is located in protected directory, please remove it manually:\n%(path)s",
            path=path,
        )

