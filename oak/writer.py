"""Writing generated LogValue files to disk."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from oak.generator import GENERATED_HEADER, OUTPUT_SUFFIX, GenerationResult

BACKUP_SUFFIX = ".bak"
_WRITE_PROBE = ".oak_write_test"


class WriteError(Exception):
    """Raised when generated code cannot be written."""


def _parent_dir(file_path: str) -> str:
    return os.path.dirname(file_path) or "."


def _exists(path: str) -> bool:
    try:
        os.stat(path)
    except OSError:
        return False
    return True


class Writer:
    """Writes generation results and manages backups of overwritten files."""

    def write_result(self, result: GenerationResult | None) -> None:
        """Write one generated file, creating its directory if needed."""
        if result is None:
            raise WriteError("generation result is nil")

        directory = _parent_dir(result.file_path)
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"failed to create directory {directory}: {exc}") from exc

        if _exists(result.file_path):
            print(f"Overwriting existing file: {result.file_path}")

        try:
            Path(result.file_path).write_bytes(result.content.encode("utf-8"))
        except OSError as exc:
            raise WriteError(f"failed to write file {result.file_path}: {exc}") from exc

        print(f"Generated: {result.file_path}")

    def write_results(self, results: Iterable[GenerationResult]) -> None:
        """Write every result; report all failures and raise if any occurred."""
        results = list(results)
        if not results:
            raise WriteError("no results to write")

        errors: list[WriteError] = []
        for result in results:
            try:
                self.write_result(result)
            except WriteError as exc:
                errors.append(exc)

        if errors:
            first, *rest = errors
            print(f"Error: {first}")
            for error in rest:
                print(f"Additional error: {error}")
            raise WriteError(f"failed to write {len(errors)} out of {len(results)} files")

        print(f"Successfully generated {len(results)} file(s)")

    def validate_output_path(self, file_path: str | os.PathLike[str]) -> None:
        """Check that the directory of the given path exists or can be created and is writable."""
        directory = _parent_dir(os.fspath(file_path))
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"cannot create directory {directory}: {exc}") from exc

        probe = os.path.join(directory, _WRITE_PROBE)
        try:
            Path(probe).write_bytes(b"test")
        except OSError as exc:
            raise WriteError(f"cannot write to directory {directory}: {exc}") from exc

        try:
            os.remove(probe)
        except OSError:
            pass

    def backup_existing_file(self, file_path: str | os.PathLike[str]) -> None:
        """Copy an existing file to ``<path>.bak``; do nothing if it does not exist."""
        path = os.fspath(file_path)
        try:
            os.stat(path)
        except FileNotFoundError:
            return
        except OSError:
            pass

        backup_path = path + BACKUP_SUFFIX
        try:
            content = Path(path).read_bytes()
        except OSError as exc:
            raise WriteError(f"failed to read existing file {path}: {exc}") from exc

        try:
            Path(backup_path).write_bytes(content)
        except OSError as exc:
            raise WriteError(f"failed to create backup {backup_path}: {exc}") from exc

        print(f"Created backup: {backup_path}")

    def cleanup_backups(self, file_paths: Iterable[str | os.PathLike[str]]) -> None:
        """Remove the backups made for the given files, warning on failures."""
        for file_path in file_paths:
            backup_path = os.fspath(file_path) + BACKUP_SUFFIX
            if not _exists(backup_path):
                continue
            try:
                os.remove(backup_path)
            except OSError as exc:
                print(f"Warning: failed to remove backup file {backup_path}: {exc}")


def output_file_name(package_name: str) -> str:
    """Return the name of the generated file for a package."""
    return package_name + OUTPUT_SUFFIX


def is_generated_file(file_path: str | os.PathLike[str]) -> bool:
    """Return True if the file starts with the oak generation marker."""
    try:
        content = Path(file_path).read_bytes()
    except FileNotFoundError:
        return False
    return content.startswith(GENERATED_HEADER.encode("utf-8"))