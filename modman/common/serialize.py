# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""YAML and JSON serialization and deserialization functions."""

from __future__ import annotations

import functools
from enum import Enum
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from frozendict import frozendict

# detect the best json library to use
from requests.compat import json

if TYPE_CHECKING:
    from typing import Any

log = getLogger(__name__)


class ModmanJSONEncoder(json.JSONEncoder):
    def default(self, obj: Any) -> Any:
        # Python types
        if isinstance(obj, Enum):
            return obj.value
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, frozendict):
            return dict(obj)

        # model types
        for attr in ("dump", "__json__", "to_json", "as_json"):
            if method := getattr(obj, attr, None):
                return method()

        # default
        return super().default(obj)


def json_dump(obj, **kwargs):
    kwargs.setdefault("cls", ModmanJSONEncoder)
    kwargs.setdefault("indent", 2)
    return json.dumps(obj, **kwargs)


json_load = json.loads
JSONDecodeError = json.JSONDecodeError


@functools.cache
def _yaml_round_trip():
    from ruamel.yaml import YAML

    parser = YAML(typ="rt")
    parser.indent(mapping=2, offset=2, sequence=4)
    return parser


def yaml_round_trip_load(string):
    return _yaml_round_trip().load(string)

