"""Rendering of Go LogValue methods for analysed structs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable

from oak.analysis import FieldAction, TypeAnalyzer
from oak.config import Config
from oak.parser import StructInfo

GENERATED_HEADER = "// Code generated by oak. DO NOT EDIT."
OUTPUT_SUFFIX = "_logvalue.go"


class GenerationError(Exception):
    """Raised when LogValue code cannot be generated."""


@dataclass
class GenerationResult:
    """Generated source for one package and where it belongs."""

    package_name: str
    file_path: str
    content: str


@dataclass
class FieldTemplateData:
    """A field as it appears in the generated method."""

    name: str
    log_statement: str


@dataclass
class StructTemplateData:
    """A struct as it appears in the generated file."""

    name: str
    receiver_name: str
    fields: list[FieldTemplateData] = field(default_factory=list)


class Generator:
    """Produces LogValue methods for structs of one package."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.analyzer = TypeAnalyzer(config)

    def generate_for_structs(self, structs: Iterable[StructInfo]) -> GenerationResult:
        """Generate one file holding LogValue methods for the given structs."""
        structs = list(structs)
        if not structs:
            raise GenerationError("no structs provided for generation")

        package_name = structs[0].package_name
        package_dir = os.path.dirname(structs[0].file_path)

        prepared = [
            self.prepare_struct_data(struct_info)
            for struct_info in structs
            if self.analyzer.has_loggable_fields(struct_info)
        ]
        if not prepared:
            raise GenerationError("no structs with loggable fields found")

        content = _render(package_name, prepared)
        file_path = os.path.join(package_dir, package_name + OUTPUT_SUFFIX)
        return GenerationResult(package_name=package_name, file_path=file_path, content=content)

    def prepare_struct_data(self, struct_info: StructInfo) -> StructTemplateData:
        """Build the per-struct data used to render its method."""
        if not struct_info.name:
            raise GenerationError("struct name is empty")
        receiver_name = struct_info.name[0].lower()

        fields = [
            FieldTemplateData(
                name=analysis.field.name,
                log_statement=self.analyzer.generate_log_statement(analysis, receiver_name),
            )
            for analysis in self.analyzer.analyze_struct(struct_info)
            if analysis.action is not FieldAction.SKIP
        ]
        return StructTemplateData(
            name=struct_info.name, receiver_name=receiver_name, fields=fields
        )


def _render(package_name: str, structs: list[StructTemplateData]) -> str:
    _require_identifier(package_name, "package name")
    lines = [GENERATED_HEADER, f"package {package_name}", "", 'import "log/slog"']
    for struct in structs:
        _require_identifier(struct.name, "struct name")
        lines.extend(
            [
                "",
                f"// LogValue implements slog.LogValuer for {struct.name}",
                f"func ({struct.receiver_name} {struct.name}) LogValue() slog.Value {{",
                "\treturn slog.GroupValue(",
            ]
        )
        for field_data in struct.fields:
            _require_selector(field_data.name)
            statement_lines = field_data.log_statement.split("\n")
            statement_lines[-1] += ","
            lines.extend(f"\t\t{line}" for line in statement_lines)
        lines.extend(["\t)", "}"])
    return "\n".join(lines) + "\n"


def _require_identifier(name: str, what: str) -> None:
    if not name.isidentifier():
        raise GenerationError(f"failed to format generated code: invalid {what} {name!r}")


def _require_selector(name: str) -> None:
    if not all(part.isidentifier() for part in name.split(".")):
        raise GenerationError(f"failed to format generated code: invalid field name {name!r}")