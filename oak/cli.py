"""Command-line option parsing and selection of what to process."""

from __future__ import annotations

import enum
import os
import stat
import sys
from dataclasses import dataclass, field
from typing import Iterable

RECURSIVE_PATTERN = "./..."

_USAGE = """Usage: oak [options] [path]

Oak generates LogValue methods for Go structs to integrate with log/slog.

Options:
  -h\tShow help message (shorthand)
  -help
    \tShow help message
  -package string
    \tPath to a package directory to process
  -source string
    \tPath to a specific Go source file to process
  -v\tShow version information (shorthand)
  -version
    \tShow version information

Examples:
  oak                           # Process current directory based on oak.yaml
  oak ./...                     # Process all packages recursively
  oak ./internal/booking        # Process specific package
  oak --package ./internal/booking
  oak --source ./booking.go     # Process specific file
"""

_BOOL_FLAGS = {"help": "help", "h": "help", "version": "version", "v": "version"}
_STRING_FLAGS = {"source": "source_file", "package": "package_path"}
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class UsageError(Exception):
    """Raised when command-line arguments are malformed or contradictory."""


class ProcessingMode(enum.Enum):
    """How oak chooses what to process."""

    CONFIG = 0
    SOURCE_FILE = 1
    PACKAGE = 2
    POSITIONAL = 3


@dataclass
class ProcessingTarget:
    """What oak should process and how it was chosen."""

    mode: ProcessingMode
    paths: list[str] = field(default_factory=list)
    use_flags: bool = False


@dataclass
class Options:
    """Parsed command-line options."""

    source_file: str = ""
    package_path: str = ""
    positional_args: list[str] = field(default_factory=list)
    help: bool = False
    version: bool = False

    def validate(self) -> None:
        """Reject conflicting flags and paths that do not exist."""
        if self.source_file and self.package_path:
            raise UsageError("--source and --package flags cannot be used together")

        if (self.source_file or self.package_path) and self.positional_args:
            print("Warning: Positional arguments ignored when using flags", file=sys.stderr)

        if self.source_file:
            if not self.source_file.endswith(".go"):
                raise UsageError(f"source file must have .go extension: {self.source_file}")
            if _missing(self.source_file):
                raise UsageError(f"source file does not exist: {self.source_file}")

        if self.package_path and _missing(self.package_path):
            raise UsageError(f"package path does not exist: {self.package_path}")

        for arg in self.positional_args:
            if arg not in (RECURSIVE_PATTERN, ".") and _missing(arg):
                raise UsageError(f"path does not exist: {arg}")

    def processing_target(self) -> ProcessingTarget:
        """Decide what to process: flags first, then positional arguments, then config."""
        if self.source_file:
            return ProcessingTarget(ProcessingMode.SOURCE_FILE, [self.source_file], True)
        if self.package_path:
            return ProcessingTarget(ProcessingMode.PACKAGE, [self.package_path], True)
        if self.positional_args:
            return ProcessingTarget(ProcessingMode.POSITIONAL, list(self.positional_args), False)
        return ProcessingTarget(ProcessingMode.CONFIG, [], False)


def parse_args(args: Iterable[str]) -> Options:
    """Parse command-line arguments; flags stop at the first positional argument."""
    try:
        return _parse(list(args))
    except UsageError as exc:
        print(exc, file=sys.stderr)
        print(_USAGE, end="", file=sys.stderr)
        raise


def _parse(remaining: list[str]) -> Options:
    opts = Options()
    while remaining:
        arg = remaining[0]
        if len(arg) < 2 or arg[0] != "-":
            break
        minuses = 1
        if arg[1] == "-":
            if len(arg) == 2:
                remaining.pop(0)
                break
            minuses = 2
        body = arg[minuses:]
        if not body or body[0] in "-=":
            raise UsageError(f"bad flag syntax: {arg}")
        remaining.pop(0)

        name, has_value, value = body.partition("=")
        if name in _BOOL_FLAGS:
            setattr(opts, _BOOL_FLAGS[name], _parse_bool(name, value) if has_value else True)
        elif name in _STRING_FLAGS:
            if not has_value:
                if not remaining:
                    raise UsageError(f"flag needs an argument: -{name}")
                value = remaining.pop(0)
            setattr(opts, _STRING_FLAGS[name], value)
        else:
            raise UsageError(f"flag provided but not defined: -{name}")

    opts.positional_args = remaining
    return opts


def _parse_bool(name: str, value: str) -> bool:
    if value in _TRUE_WORDS:
        return True
    if value in _FALSE_WORDS:
        return False
    raise UsageError(f'invalid boolean value "{value}" for -{name}: parse error')


def _missing(path: str) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return True
    except OSError:
        return False
    return False


def expand_paths(paths: Iterable[str]) -> list[str]:
    """Replace each ``./...`` pattern with the Go package directories it covers."""
    expanded: list[str] = []
    for path in paths:
        if path == RECURSIVE_PATTERN:
            try:
                expanded.extend(find_go_packages("."))
            except OSError as exc:
                raise UsageError(f"failed to expand {path}: {exc}") from exc
        else:
            expanded.append(path)
    return expanded


def find_go_packages(root: str | os.PathLike[str]) -> list[str]:
    """Return directories under root holding ``.go`` files, skipping hidden and vendor ones."""
    root_path = os.fspath(root)
    packages: list[str] = []
    _walk(root_path, os.path.basename(os.path.normpath(root_path)), packages)
    return packages


def _walk(path: str, name: str, packages: list[str]) -> None:
    info = os.lstat(path)
    if not stat.S_ISDIR(info.st_mode):
        return
    if name.startswith(".") or name == "vendor":
        return
    if has_go_files_in_dir(path):
        packages.append(path)
    for entry in sorted(os.listdir(path)):
        _walk(os.path.normpath(os.path.join(path, entry)), entry, packages)


def has_go_files_in_dir(directory: str | os.PathLike[str]) -> bool:
    """Return True if the directory directly contains a ``.go`` file."""
    with os.scandir(directory) as entries:
        return any(
            not entry.is_dir(follow_symlinks=False) and entry.name.endswith(".go")
            for entry in entries
        )