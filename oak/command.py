"""The ``oak`` command: find marked structs and write their LogValue methods."""

from __future__ import annotations

import sys
from typing import Iterable, Sequence

from oak.cli import ProcessingMode, ProcessingTarget, UsageError, expand_paths, parse_args
from oak.config import Config, ConfigError, load_config
from oak.generator import GenerationError, Generator
from oak.parser import ParseError, Parser, StructInfo
from oak.writer import WriteError, Writer

VERSION = "v0.0.1"

_HELP = """oak {version} - Go structured logging code generator

USAGE:
    oak [OPTIONS] [PATH]

DESCRIPTION:
    Oak generates LogValue() methods for Go structs to integrate with log/slog.
    It automatically handles type-specific logging, field redaction, and exclusion.

OPTIONS:
    --source <FILE>     Process a specific Go source file
    --package <DIR>     Process a specific package directory
    --help, -h          Show this help message
    --version, -v       Show version information

ARGUMENTS:
    PATH                Package path or directory to process
                        Use "./..." to process all packages recursively

EXAMPLES:
    oak                           Process current directory based on oak.yaml
    oak ./...                     Process all packages recursively
    oak ./internal/booking        Process specific package
    oak --package ./internal/booking
    oak --source ./booking.go     Process specific file

CONFIGURATION:
    Oak uses an oak.yaml file in the project root for configuration.
    See the example oak.yaml file for available options.
"""

_FAILURES = (UsageError, ConfigError, ParseError, GenerationError, WriteError, OSError)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command, report any failure on stderr and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        run(args)
    except _FAILURES as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def run(args: Iterable[str]) -> None:
    """Process the given command-line arguments; raise on any failure."""
    try:
        opts = parse_args(args)
    except UsageError as exc:
        raise UsageError(f"failed to parse arguments: {exc}") from exc

    if opts.help:
        print_help()
        return
    if opts.version:
        print(f"oak {VERSION}")
        return

    try:
        opts.validate()
    except UsageError as exc:
        raise UsageError(f"invalid arguments: {exc}") from exc

    try:
        cfg = load_config()
    except ConfigError as exc:
        raise ConfigError(f"failed to load configuration: {exc}") from exc

    target = opts.processing_target()
    try:
        paths = processing_paths(target, cfg)
    except UsageError as exc:
        raise UsageError(f"failed to determine processing paths: {exc}") from exc

    if not paths:
        raise UsageError("no paths to process")

    parser = Parser()
    all_structs: list[StructInfo] = []
    for path in paths:
        try:
            if target.mode is ProcessingMode.SOURCE_FILE:
                result = parser.parse_file(path)
            else:
                result = parser.parse_package(path)
        except ParseError as exc:
            raise ParseError(f"failed to parse {path}: {exc}") from exc
        all_structs.extend(result.structs)

    if not all_structs:
        print("No structs found with //go:generate oak directive")
        return

    package_structs = group_structs_by_package(all_structs)
    generator = Generator(cfg)
    writer = Writer()

    for package_name, structs in package_structs.items():
        try:
            generated = generator.generate_for_structs(structs)
        except GenerationError as exc:
            raise GenerationError(
                f"failed to generate code for package {package_name}: {exc}"
            ) from exc
        try:
            writer.write_result(generated)
        except WriteError as exc:
            raise WriteError(f"failed to write generated file: {exc}") from exc

    print(
        f"Successfully processed {len(all_structs)} struct(s) "
        f"in {len(package_structs)} package(s)"
    )


def processing_paths(target: ProcessingTarget, cfg: Config) -> list[str]:
    """Return the files or directories to parse for the chosen target."""
    if target.mode in (ProcessingMode.SOURCE_FILE, ProcessingMode.PACKAGE):
        return list(target.paths)
    if target.mode is ProcessingMode.POSITIONAL:
        return expand_paths(target.paths)
    if target.mode is ProcessingMode.CONFIG:
        return expand_paths(cfg.get_packages())
    raise UsageError("unknown processing mode")


def group_structs_by_package(structs: Iterable[StructInfo]) -> dict[str, list[StructInfo]]:
    """Group structs by package name, keeping their order within each package."""
    groups: dict[str, list[StructInfo]] = {}
    for struct_info in structs:
        groups.setdefault(struct_info.package_name, []).append(struct_info)
    return groups


def print_help() -> None:
    """Print the help text to stdout."""
    print(_HELP.format(version=VERSION), end="")


if __name__ == "__main__":
    raise SystemExit(main())