# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Entry point for all modman subcommands."""

from __future__ import annotations

import sys
from argparse import ArgumentParser
from logging import getLogger
from typing import TYPE_CHECKING

from .. import ModmanError, __version__
from ..common.constants import NULL

if TYPE_CHECKING:
    from argparse import Namespace

    from ..core.manager import PackageManager

log = getLogger(__name__)


def init_loggers():
    import logging

    from ..base.context import context
    from ..gateways.logging import initialize_logging, set_log_level

    initialize_logging()

    # silence stdout chatter to avoid interfering with JSON output
    if context.json:
        logging.getLogger("modman.stdout.verbose").setLevel(logging.CRITICAL + 10)

    set_log_level(context.log_level)


def stdout_json(data):
    from ..common.serialize import json_dump

    getLogger("modman.stdout").info(json_dump(data, sort_keys=True))


def add_output_options(p: ArgumentParser):
    output = p.add_argument_group("Output, Prompt, and Flow Control Options")
    output.add_argument(
        "--json",
        action="store_true",
        default=NULL,
        help="Report all output as json.",
    )
    output.add_argument(
        "-v",
        "--verbose",
        action="count",
        dest="verbosity",
        default=NULL,
        help="Can be used multiple times. Once for detailed output, twice for INFO logging, "
        "thrice for DEBUG logging, four times for TRACE logging.",
    )
    output.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=NULL,
        help="Do not display progress bar.",
    )
    paths = p.add_argument_group("Location Options")
    paths.add_argument(
        "--root-dir",
        dest="root_dir",
        default=NULL,
        help="Application data directory holding the packages container.",
    )
    paths.add_argument(
        "--config-dir",
        dest="config_dir",
        default=NULL,
        help="Directory holding modSettings.json.",
    )


def generate_parser() -> ArgumentParser:
    p = ArgumentParser(
        prog="modman",
        description="Install, remove, enable and disable game content packages.",
    )
    p.add_argument("-V", "--version", action="version", version=f"modman {__version__}")
    sub = p.add_subparsers(metavar="COMMAND", title="commands", dest="cmd")
    sub.required = True

    p_list = sub.add_parser("list", help="List known packages and their state.")
    p_list.add_argument(
        "--installed", action="store_true", help="Only list installed packages."
    )
    add_output_options(p_list)
    p_list.set_defaults(func=execute_list)

    p_install = sub.add_parser("install", help="Install a package.")
    p_install.add_argument("name", help="Name of the package to install.")
    p_install.add_argument(
        "--archive",
        metavar="PATH",
        help="Install from a local archive instead of the configured repositories.",
    )
    add_output_options(p_install)
    p_install.set_defaults(func=execute_install)

    for command, description in (
        ("uninstall", "Remove an installed package."),
        ("enable", "Enable an installed package."),
        ("disable", "Disable an enabled package."),
    ):
        p_cmd = sub.add_parser(command, help=description)
        p_cmd.add_argument("name", help="Name of the package.")
        add_output_options(p_cmd)
        p_cmd.set_defaults(func=execute_transition)

    p_refresh = sub.add_parser("refresh", help="Fetch the repository indexes.")
    add_output_options(p_refresh)
    p_refresh.set_defaults(func=execute_refresh)

    return p


def _manager() -> PackageManager:
    from ..base.context import context
    from ..core.manager import PackageManager

    return PackageManager(context)


def _report(manager: PackageManager, ok: bool, name=None) -> int:
    from ..base.context import context

    errors = manager.get_errors()
    if context.json:
        stdout_json({"success": ok, "name": name, "errors": errors})
    else:
        stderr = getLogger("modman.stderr")
        for line in errors:
            stderr.info(line)
    return 0 if ok else 1


def execute_list(args: Namespace, parser: ArgumentParser) -> int:
    from ..base.context import context

    manager = _manager()
    packages = sorted(manager.packages, key=lambda p: p.name)
    if args.installed:
        packages = [p for p in packages if p.installed]

    if context.json:
        stdout_json(
            {
                "packages": [p.dump() for p in packages],
                "orphans": list(manager.orphans),
            }
        )
        return 0

    stdout = getLogger("modman.stdout")
    if not packages:
        stdout.info("No packages found in %s", manager.packages_dir)
    for package in packages:
        flags = "enabled" if package.enabled else str(package.state)
        if package.update_available:
            flags += ", update available"
        if package.installed and not package.compatible:
            flags += ", incompatible"
        stdout.info("%-40s %-12s [%s]", package.name, str(package.version) or "-", flags)
    for orphan in manager.orphans:
        stdout.info("orphaned directory: %s", orphan)
    return 0


def execute_install(args: Namespace, parser: ArgumentParser) -> int:
    manager = _manager()
    if args.archive:
        ok = manager.add_archive_source(args.name, args.archive) and manager.install(
            args.name, args.archive
        )
    else:
        manager.refresh_repositories()
        ok = manager.install_from_repository(args.name)
    return _report(manager, ok, args.name)


def execute_transition(args: Namespace, parser: ArgumentParser) -> int:
    manager = _manager()
    ok = getattr(manager, args.cmd)(args.name)
    return _report(manager, ok, args.name)


def execute_refresh(args: Namespace, parser: ArgumentParser) -> int:
    from ..base.context import context

    manager = _manager()
    graph = manager.refresh_repositories()
    updates = sorted(p.name for p in graph if p.update_available)
    if context.json:
        stdout_json({"packages": len(graph), "updates": updates})
    else:
        stdout = getLogger("modman.stdout")
        stdout.info("%d packages known", len(graph))
        for name in updates:
            stdout.info("update available: %s", name)
    return 0


def modman_exception_handler(func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except ModmanError as e:
        init_loggers()
        getLogger("modman.stderr").info("%s: %s", e.__class__.__name__, e)
        return e.return_code
    except KeyboardInterrupt:
        init_loggers()
        getLogger("modman.stderr").info("\nOperation interrupted")
        return 1


def main_subshell(*args):
    from ..base.context import context

    parser = generate_parser()
    parsed = parser.parse_args(args)

    context.__init__(argparse_args=parsed)
    init_loggers()
    context.validate_configuration()

    return parsed.func(parsed, parser)


def main(*args, **kwargs):
    args = args or tuple(sys.argv[1:])
    return modman_exception_handler(main_subshell, *args)
