# Copyright (C) 2012 Anaconda, Inc
# SPDX-License-Identifier: BSD-3-Clause
"""Layered application configuration.

A :class:`Configuration` subclass declares its settings as :class:`ParameterLoader`
attributes. Values are gathered from, in increasing priority:

  - YAML files (or directories of them) on a search path
  - ``<APP_NAME>_<KEY>`` environment variables
  - parsed command line arguments

Each parameter is resolved lazily on first access and cached until the configuration
is reloaded. A value tagged ``!important`` in the environment cannot be overridden by
a higher-priority source.
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from itertools import chain
from logging import getLogger
from os import environ, scandir
from os.path import basename, expandvars, isdir, isfile
from typing import TYPE_CHECKING

from boltons.setutils import IndexedSet
from frozendict import frozendict
from ruamel.yaml.reader import ReaderError
from ruamel.yaml.scanner import ScannerError

from .. import ModmanError, ModmanMultiError
from .compat import isiterable
from .constants import EMPTY_MAP, NULL
from .path import expand
from .serialize import yaml_round_trip_load

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from typing import Any

log = getLogger(__name__)

ENV_SOURCE = "envvars"
CMD_LINE_SOURCE = "cmd_line"
MERGED_SOURCE = "<<merged>>"
IMPORTANT_FLAG = "!important"

BOOLISH_TRUE = ("true", "yes", "on", "y", "1")
BOOLISH_FALSE = ("false", "off", "n", "no", "non", "none", "0", "")


def pretty_list(iterable, padding="  "):
    if not isiterable(iterable):
        iterable = [iterable]
    return "\n".join(f"{padding}- {item}" for item in iterable)


class TypeCoercionError(ModmanError, ValueError):
    def __init__(self, value, msg, *args, **kwargs):
        self.value = value
        super().__init__(msg, *args, **kwargs)


def boolify(value):
    """Convert a number, string, or sequence type into a pure boolean.

    Examples:
        >>> boolify('yes')
        True
        >>> boolify('0')
        False
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in BOOLISH_TRUE:
            return True
        if lowered in BOOLISH_FALSE:
            return False
        raise TypeCoercionError(value, f"The value {value!r} cannot be boolified.")
    return bool(value)


def typify(value, type_hint=None):
    """Coerce a raw value, usually a string, into ``type_hint``.

    Without a type hint the value is returned unchanged.

    Examples:
        >>> typify('32', int)
        32
        >>> typify('0.5', float)
        0.5
    """
    if type_hint is None or isinstance(value, type_hint):
        return value
    try:
        if type_hint is bool:
            return boolify(value)
        if type_hint in (int, float):
            return type_hint(value.strip() if isinstance(value, str) else value)
        if type_hint is str:
            return str(value)
    except TypeCoercionError:
        raise
    except (TypeError, ValueError):
        raise TypeCoercionError(value, f"The value {value!r} cannot be cast to {type_hint}.")
    raise TypeCoercionError(value, f"Unsupported type hint {type_hint!r}.")


class ConfigurationError(ModmanError):
    pass


class ConfigurationLoadError(ConfigurationError):
    def __init__(self, path, message_addition="", **kwargs):
        message = "Unable to load configuration file.\n  path: %(path)s\n"
        super().__init__(message + message_addition, path=path, **kwargs)


class ValidationError(ConfigurationError):
    def __init__(self, parameter_name, parameter_value, source, msg=None, **kwargs):
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value
        self.source = source
        if msg is None:
            msg = (
                f"Parameter {parameter_name} = {parameter_value!r} "
                f"declared in {source} is invalid."
            )
        super().__init__(msg, **kwargs)


class MultipleKeysError(ValidationError):
    def __init__(self, source, keys, preferred_key):
        self.keys = keys
        msg = (
            f"Multiple aliased keys in {source}:\n{pretty_list(sorted(keys))}\n"
            f"Declare only one of them, preferably '{preferred_key}'."
        )
        super().__init__(preferred_key, None, source, msg=msg)


class InvalidTypeError(ValidationError):
    def __init__(self, parameter_name, parameter_value, source, wrong_type, valid_type):
        self.wrong_type = wrong_type
        self.valid_type = valid_type
        msg = (
            f"Parameter {parameter_name} = {parameter_value!r} declared in {source} "
            f"has type {wrong_type}, expected {valid_type}."
        )
        super().__init__(parameter_name, parameter_value, source, msg=msg)


class CustomValidationError(ValidationError):
    def __init__(self, parameter_name, parameter_value, source, custom_message):
        msg = (
            f"Parameter {parameter_name} = {parameter_value!r} declared in {source} is "
            f"invalid.\n{custom_message}"
        )
        super().__init__(parameter_name, parameter_value, source, msg=msg)


class MultiValidationError(ModmanMultiError, ConfigurationError):
    pass


def raise_errors(errors):
    if not errors:
        return True
    elif len(errors) == 1:
        raise errors[0]
    else:
        raise MultiValidationError(errors)


# ----------------------------------------------------------------------------
# raw values, one map of key -> RawParameter per source


@dataclass(frozen=True)
class RawParameter:
    source: str
    key: str
    value: Any
    important: bool = False

    def items(self, delimiter=",") -> tuple | None:
        """The value as a sequence; environment strings are split on ``delimiter``."""
        if self.value is None:
            return None
        if self.source == ENV_SOURCE and isinstance(self.value, str):
            return tuple(v.strip() for v in self.value.split(delimiter) if v.strip())
        if isiterable(self.value) and not isinstance(self.value, Mapping):
            return tuple(self.value)
        return None


def env_raw_parameters(app_name) -> Mapping[str, RawParameter]:
    prefix = f"{app_name.upper()}_"
    raw = {}
    for name, value in environ.items():
        if not name.startswith(prefix):
            continue
        key = name[len(prefix) :].lower()
        value, flag, _ = value.partition(IMPORTANT_FLAG)
        raw[key] = RawParameter(ENV_SOURCE, key, value.strip(), important=bool(flag))
    return raw or EMPTY_MAP


def argparse_raw_parameters(args: Mapping) -> Mapping[str, RawParameter]:
    return {
        key: RawParameter(CMD_LINE_SOURCE, key, value) for key, value in args.items()
    } or EMPTY_MAP


def yaml_raw_parameters(filepath) -> Mapping[str, RawParameter]:
    with open(filepath) as fh:
        try:
            data = yaml_round_trip_load(fh)
        except ScannerError as err:
            mark = err.problem_mark
            raise ConfigurationLoadError(
                filepath,
                "  reason: invalid yaml at line %(line)s, column %(column)s",
                line=mark.line,
                column=mark.column,
            )
        except ReaderError as err:
            raise ConfigurationLoadError(
                filepath,
                "  reason: invalid yaml at position %(position)s",
                position=err.position,
            )
    if data is None:
        return EMPTY_MAP
    if not isinstance(data, Mapping):
        raise ConfigurationLoadError(
            filepath, "  reason: top level of the file must be a mapping"
        )
    return {key: RawParameter(filepath, key, value) for key, value in data.items()}


def _is_config_file(path):
    return path.endswith((".yml", ".yaml")) or basename(path).endswith("modmanrc")


def load_file_configs(search_path: Iterable[str]) -> dict[str, Mapping[str, RawParameter]]:
    """Read every existing file on ``search_path``; directories contribute their yaml files."""
    raw_data = {}
    for path in search_path:
        if "$" in expandvars(path):
            # an unset variable, e.g. $MODMANRC
            continue
        path = expand(path)
        if isfile(path):
            raw_data[path] = yaml_raw_parameters(path)
        elif isdir(path):
            for filepath in sorted(e.path for e in scandir(path) if e.is_file()):
                if _is_config_file(filepath):
                    raw_data[filepath] = yaml_raw_parameters(filepath)
    return raw_data


# ----------------------------------------------------------------------------
# parameter types


class Parameter(metaclass=ABCMeta):
    """An unloaded setting: its type, default and validation."""

    _type: type | None = None

    def __init__(self, default, validation: Callable | None = None):
        self._default = default
        self._validation = validation

    @abstractmethod
    def resolve(self, name, matches: list[RawParameter], expand_env=False):
        """Merge ``matches`` (lowest priority first) into one typed value."""
        raise NotImplementedError()

    def validate(self, name, value, source=MERGED_SOURCE) -> list[ValidationError]:
        if not isinstance(value, self._type):
            return [InvalidTypeError(name, value, source, type(value), self._type)]
        if self._validation is None:
            return []
        result = self._validation(value)
        if result is False:
            return [ValidationError(name, value, source)]
        if isinstance(result, str):
            return [CustomValidationError(name, value, source, result)]
        return []


class PrimitiveParameter(Parameter):
    """A single str, int, float or bool.

    The type is taken from the default unless ``element_type`` is given.
    """

    def __init__(self, default, element_type=None, validation=None):
        super().__init__(default, validation)
        self._type = type(default) if element_type is None else element_type

    def coerce(self, name, value, source, expand_env=False):
        if expand_env and isinstance(value, str):
            value = expandvars(value)
        try:
            return typify(value, self._type)
        except TypeCoercionError as e:
            raise CustomValidationError(name, e.value, source, str(e))

    def resolve(self, name, matches, expand_env=False):
        if not matches:
            return self.coerce(name, self._default, "default", expand_env)
        winner = next((m for m in matches if m.important), matches[-1])
        return self.coerce(name, winner.value, winner.source, expand_env)


class SequenceParameter(Parameter):
    """A tuple of primitives; sources are concatenated, highest priority first."""

    _type = tuple

    def __init__(
        self,
        element_type: PrimitiveParameter,
        default=(),
        validation=None,
        string_delimiter=",",
    ):
        super().__init__(default, validation)
        self._element_type = element_type
        self.string_delimiter = string_delimiter

    def resolve(self, name, matches, expand_env=False):
        # `repositories: ~` in a file is the same as not setting it there
        matches = [m for m in matches if m.value is not None]
        important = next((i for i, m in enumerate(matches) if m.important), None)
        if important is not None:
            matches = matches[: important + 1]

        values = IndexedSet()
        for match in reversed(matches):
            items = match.items(self.string_delimiter)
            if items is None:
                raise InvalidTypeError(
                    name, match.value, match.source, type(match.value).__name__, "tuple"
                )
            values.update(
                self._element_type.coerce(name, item, match.source, expand_env)
                for item in items
            )
        if not matches:
            values.update(self._default)
        return tuple(values)

    def validate(self, name, value, source=MERGED_SOURCE):
        errors = super().validate(name, value, source)
        for item in value:
            errors.extend(self._element_type.validate(name, item, source))
        return errors


class ParameterLoader:
    """Descriptor resolving one :class:`Parameter` against a :class:`Configuration`."""

    def __init__(self, parameter_type: Parameter, aliases=(), expandvars=False):
        self.type = parameter_type
        self.aliases = aliases
        self._expandvars = expandvars
        self.name = None
        self.names = frozenset(aliases)

    def __set_name__(self, owner, name):
        self.name = name
        self.names = frozenset((name, *self.aliases))

    def match(self, raw_parameters: Mapping[str, RawParameter]):
        """The single raw value for this parameter in one source, and any alias clash."""
        keys = self.names.intersection(raw_parameters)
        if not keys:
            return None, None
        if len(keys) == 1:
            return raw_parameters[next(iter(keys))], None
        source = raw_parameters[next(iter(keys))].source
        error = MultipleKeysError(source, keys, self.name)
        return raw_parameters.get(self.name), error

    def __get__(self, instance, owner):
        if instance is None:
            return self
        try:
            return instance._cache_[self.name]
        except KeyError:
            pass

        matches, errors = [], []
        for raw_parameters in instance.raw_data.values():
            match, error = self.match(raw_parameters)
            if match is not None:
                matches.append(match)
            if error is not None:
                errors.append(error)

        try:
            value = self.type.resolve(self.name, matches, self._expandvars)
        except ValidationError as e:
            errors.append(e)
        else:
            errors.extend(self.type.validate(self.name, value))
        raise_errors(errors)
        instance._cache_[self.name] = value
        return value


class Configuration:
    parameter_names: tuple[str, ...] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.parameter_names = tuple(
            name for name, attr in vars(cls).items() if isinstance(attr, ParameterLoader)
        )

    def __init__(self, search_path=(), app_name=None, argparse_args=None):
        # every call is a full reload from disk, environment and arguments
        self._search_path = IndexedSet(search_path)
        self._app_name = app_name
        self.raw_data: dict[str, Mapping[str, RawParameter]] = dict(
            load_file_configs(search_path)
        )
        if app_name:
            self.raw_data[ENV_SOURCE] = env_raw_parameters(app_name)

        if hasattr(argparse_args, "__dict__"):
            argparse_args = vars(argparse_args)
        self._argparse_args = frozendict(
            (k, v)
            for k, v in (argparse_args or {}).items()
            if v is not NULL and v is not None
        )
        self.raw_data[CMD_LINE_SOURCE] = argparse_raw_parameters(self._argparse_args)
        self._cache_ = {}

    def _loader(self, name) -> ParameterLoader:
        return getattr(type(self), name)

    def check_source(self, source):
        """Typed values and validation errors found in a single source."""
        typed_values = {}
        errors = []
        for name in self.parameter_names:
            loader = self._loader(name)
            match, error = loader.match(self.raw_data[source])
            if error is not None:
                errors.append(error)
            if match is None:
                continue
            try:
                value = loader.type.resolve(name, [match])
            except ValidationError as e:
                errors.append(e)
                continue
            found = loader.type.validate(name, value, match.source)
            if found:
                errors.extend(found)
            else:
                typed_values[match.key] = value
        return typed_values, errors

    def validate_all(self):
        raise_errors(
            tuple(chain.from_iterable(self.check_source(s)[1] for s in self.raw_data))
        )
        self.validate_configuration()

    def validate_configuration(self):
        errors = []
        for name in self.parameter_names:
            try:
                getattr(self, name)
            except MultiValidationError as e:
                errors.extend(e.errors)
            except ConfigurationError as e:
                errors.append(e)
        errors.extend(self.post_build_validation())
        raise_errors(errors)

    def post_build_validation(self):
        return ()

    def collect_all(self):
        typed_values = {}
        errors = []
        for source in self.raw_data:
            typed_values[source], found = self.check_source(source)
            errors.extend(found)
        raise_errors(errors)
        return {source: values for source, values in typed_values.items() if values}

    def list_parameters(self):
        return tuple(sorted(name.lstrip("_") for name in self.parameter_names))
