# oak

`oak` reads Go source files and writes `LogValue()` methods for the structs
it finds, so that those structs log through `log/slog` with attributes suited
to each field's type, with sensitive fields redacted and unwanted fields left
out.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Marking structs

A Go file is picked up when one of its comments is the directive
`go:generate oak` (as a `//` line comment or inside a `/* */` block comment;
text after the directive is allowed). Every struct type declared in such a
file gets a `LogValue()` method.

```go
//go:generate oak
type User struct {
	ID       int
	Name     string
	Password string
	Token    string `log:"redact"`
	Notes    string `log:"-"`
	Email    *string
}
```

- `log:"-"` leaves the field out entirely.
- `log:"redact"` replaces the value with the redaction message.
- A field whose name matches one of the configured `redactKeys`, ignoring
  case, is redacted as well.
- `int`, `int8` … `int64` and `uint` … `uint64` are logged with
  `slog.Int64` (converted with `int64(...)` unless already `int64`);
  `float32`/`float64` with `slog.Float64`; `string` with `slog.String`;
  `bool` with `slog.Bool`; every other type with `slog.Any`.
- Pointer fields are wrapped in a nil check that logs the string `"null"`
  when the pointer is nil and the dereferenced value otherwise.
- Embedded fields are named after their type.

The receiver of each method is the lower-cased first letter of the struct
name (`func (u User) LogValue() slog.Value`). All methods for one package go
into `<package>_logvalue.go`, in the directory of the first struct's source
file, and the file starts with `// Code generated by oak. DO NOT EDIT.`
An existing file of that name is overwritten.

A package in which every struct has all of its fields excluded is an error
("no structs with loggable fields found").

## Configuration

The `oak` command always needs an `oak.yaml`; it looks in the current
directory and then in each parent directory.

```yaml
packages:
  - ./internal/booking
  - ./internal/users
redactKeys:
  - password
  - secret
  - api_key
redactMessage: "[REDACTED]"
```

| Key             | Default        | Meaning                                          |
|-----------------|----------------|--------------------------------------------------|
| `packages`      | `["."]`        | Package directories processed when no path given |
| `redactKeys`    | `[]`           | Field names redacted regardless of tags          |
| `redactMessage` | `"[REDACTED]"` | Text logged in place of a redacted value         |

Redact keys are lower-cased on loading, and an empty `redactMessage` falls
back to `[REDACTED]`. Relative entries in `packages` must exist relative to
the current directory; an empty entry is rejected.

## Usage

```
oak                               # process the packages listed in oak.yaml
oak ./internal/booking            # one or more package directories
oak --package ./internal/booking  # one package directory, as a flag
oak --source ./booking.go         # a single source file
oak ./...                         # expand to package directories (see below)
oak --help                        # or -h
oak --version                     # or -v
```

Flags may be written with one or two dashes and as `--flag value` or
`--flag=value`; flag parsing stops at the first positional argument.
`--source` and `--package` cannot be combined, and when either is given,
positional paths are ignored with a warning. `--source` must name an
existing `.go` file.

On success the command prints each generated file and a summary line; on
failure it prints `Error: ...` to stderr and exits with status 1. When no
marked structs are found it says so and writes nothing.

The command can also be started as `python -m oak.command`.

## Library use

The pieces work on their own:

```python
from oak.config import default_config
from oak.parser import Parser
from oak.generator import Generator
from oak.writer import Writer

result = Parser().parse_package("./internal/booking")
generated = Generator(default_config()).generate_for_structs(result.structs)
Writer().write_result(generated)
```

- `oak.config`: `Config`, `default_config()`, `load_config()`,
  `load_config_from_path(path)`; raises `ConfigError`.
- `oak.parser`: `Parser.parse_file()` and `Parser.parse_package()` return a
  `ParseResult` of `StructInfo`/`FieldInfo`; also `has_oak_directive(source)`,
  `extract_log_tag(tag)` and `get_absolute_path(path)`; raises `ParseError`.
- `oak.analysis`: `TypeAnalyzer` decides each field's `FieldAction` and
  `SlogFunction` and renders its log statement.
- `oak.generator`: `Generator` returns a `GenerationResult` (package name,
  file path, content); raises `GenerationError`.
- `oak.writer`: `Writer` writes results and can check an output directory
  (`validate_output_path`), back up a file to `<path>.bak`
  (`backup_existing_file`) and remove those backups (`cleanup_backups`);
  `output_file_name(package)` and `is_generated_file(path)` help find
  generated files; raises `WriteError`.
- `oak.cli`: `parse_args()`, `Options`, `ProcessingTarget`, `expand_paths()`,
  `find_go_packages()`; raises `UsageError`.

## Limitations

- Go files are read with a small built-in tokenizer and declaration reader,
  not a Go compiler front end: types are not resolved across files or
  imports, and unusual type forms (channels, function types, generic
  instantiations) are recorded as `unknown` and logged with `slog.Any`.
- Generated code is laid out with tabs but not run through a Go formatter;
  only package, struct and field names are checked to be identifiers.
- `./...` is expanded by walking from `.`; because that starting directory's
  own name begins with a dot, it is treated as hidden and skipped, so the
  expansion finds no packages and the command stops with "no paths to
  process". Name package directories explicitly instead.
- `oak` does not run `go generate` or any other program.