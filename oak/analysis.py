"""Field analysis: decides how each struct field is logged."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from oak.config import Config
from oak.parser import FieldInfo, StructInfo

SKIP_TAG = "-"
REDACT_TAG = "redact"

_INTEGER_TYPES = frozenset(
    {"int", "int8", "int16", "int32", "int64", "uint", "uint8", "uint16", "uint32", "uint64"}
)
_FLOAT_TYPES = frozenset({"float32", "float64"})


class SlogFunction(str, enum.Enum):
    """The slog attribute constructor used for a field."""

    INT64 = "slog.Int64"
    STRING = "slog.String"
    BOOL = "slog.Bool"
    FLOAT64 = "slog.Float64"
    ANY = "slog.Any"

    def __str__(self) -> str:
        return self.value


class FieldAction(enum.Enum):
    """What happens to a field in the log output."""

    LOG = "log"
    REDACT = "redact"
    SKIP = "skip"


@dataclass
class FieldAnalysis:
    """The outcome of analysing one struct field."""

    field: FieldInfo
    action: FieldAction = FieldAction.LOG
    slog_func: SlogFunction | None = None
    log_value: str = ""


class TypeAnalyzer:
    """Chooses actions and slog constructors for struct fields."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def analyze_field(self, field: FieldInfo) -> FieldAnalysis:
        """Analyse a single field."""
        if field.log_tag == SKIP_TAG:
            return FieldAnalysis(field=field, action=FieldAction.SKIP)
        if self.should_redact_field(field):
            return FieldAnalysis(
                field=field,
                action=FieldAction.REDACT,
                slog_func=SlogFunction.STRING,
                log_value=self.config.redact_message,
            )
        return FieldAnalysis(
            field=field, action=FieldAction.LOG, slog_func=self.slog_function_for(field)
        )

    def analyze_struct(self, struct_info: StructInfo) -> list[FieldAnalysis]:
        """Analyse every field of a struct, in declaration order."""
        return [self.analyze_field(field) for field in struct_info.fields]

    def should_redact_field(self, field: FieldInfo) -> bool:
        """Return True if the field is tagged for redaction or matches a redact key."""
        if field.log_tag == SKIP_TAG:
            return False
        if field.log_tag == REDACT_TAG:
            return True
        return self.config.should_redact_field(field.name)

    def slog_function_for(self, field: FieldInfo) -> SlogFunction:
        """Return the slog constructor suited to the field's type."""
        field_type = field.type
        if field.is_pointer and field_type.startswith("*"):
            field_type = field_type[1:]

        if field_type in _INTEGER_TYPES:
            return SlogFunction.INT64
        if field_type == "string":
            return SlogFunction.STRING
        if field_type == "bool":
            return SlogFunction.BOOL
        if field_type in _FLOAT_TYPES:
            return SlogFunction.FLOAT64
        return SlogFunction.ANY

    def generate_log_statement(self, analysis: FieldAnalysis, receiver_name: str) -> str:
        """Return the Go expression that logs the analysed field."""
        name = analysis.field.name
        if analysis.action is FieldAction.SKIP:
            return ""
        if analysis.action is FieldAction.REDACT:
            func = analysis.slog_func or SlogFunction.STRING
            return f'{func}("{name}", "{analysis.log_value}")'
        return self._normal_statement(analysis, receiver_name)

    def has_loggable_fields(self, struct_info: StructInfo) -> bool:
        """Return True if at least one field of the struct is not skipped."""
        return any(
            analysis.action is not FieldAction.SKIP
            for analysis in self.analyze_struct(struct_info)
        )

    def _normal_statement(self, analysis: FieldAnalysis, receiver_name: str) -> str:
        field = analysis.field
        name = field.name
        accessor = f"{receiver_name}.{name}"
        func = analysis.slog_func or SlogFunction.ANY

        if func is SlogFunction.INT64:
            if field.is_pointer:
                return _nil_guarded(accessor, name, f'slog.Int64("{name}", int64(*{accessor}))')
            if field.type != "int64":
                return f'{func}("{name}", int64({accessor}))'
            return f'{func}("{name}", {accessor})'

        if func is SlogFunction.FLOAT64:
            if field.is_pointer:
                return _nil_guarded(
                    accessor, name, f'slog.Float64("{name}", float64(*{accessor}))'
                )
            if field.type != "float64":
                return f'{func}("{name}", float64({accessor}))'
            return f'{func}("{name}", {accessor})'

        if field.is_pointer:
            return _nil_guarded(accessor, name, f'{func}("{name}", *{accessor})')
        return f'{func}("{name}", {accessor})'


def _nil_guarded(accessor: str, name: str, value_expression: str) -> str:
    return "\n".join(
        [
            "func() slog.Attr {",
            f"\tif {accessor} == nil {{",
            f'\t\treturn slog.String("{name}", "null")',
            "\t}",
            f"\treturn {value_expression}",
            "}()",
        ]
    )