"""Discovery of struct declarations in Go source files marked for oak."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

DIRECTIVE = "go:generate oak"

_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type", "var",
    }
)
_SEMICOLON_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})
_TYPE_KEYWORDS = frozenset({"map", "chan", "func", "struct", "interface"})
_OPERATORS = sorted(
    [
        "<<=", ">>=", "&^=", "...", "&&", "||", "<-", "++", "--", "==", "!=", "<=",
        ">=", ":=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "&^",
        "+", "-", "*", "/", "%", "&", "|", "^", "<", ">", "=", "!", "~", "(", ")",
        "[", "]", "{", "}", ",", ";", ".", ":",
    ],
    key=len,
    reverse=True,
)
_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")


class ParseError(Exception):
    """Raised when a Go source file or package cannot be parsed."""


@dataclass
class FieldInfo:
    """A field of a struct declaration."""

    name: str
    type: str = ""
    tag: str = ""
    log_tag: str = ""
    is_pointer: bool = False


@dataclass
class StructInfo:
    """A struct declaration that needs a LogValue method."""

    name: str
    package_name: str = ""
    fields: list[FieldInfo] = field(default_factory=list)
    file_path: str = ""


@dataclass
class ParseResult:
    """Structs found while parsing, with any errors collected along the way."""

    structs: list[StructInfo] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)


@dataclass(frozen=True)
class _Token:
    kind: str
    value: str
    line: int


@dataclass
class _ParsedFile:
    package_name: str
    comments: list[str]
    declarations: list[tuple[str, list[FieldInfo]]]

    @property
    def has_directive(self) -> bool:
        return any(_is_oak_directive(comment) for comment in self.comments)

    def structs(self, file_path: str) -> list[StructInfo]:
        return [
            StructInfo(name=name, package_name=self.package_name, fields=fields, file_path=file_path)
            for name, fields in self.declarations
        ]


class Parser:
    """Finds structs in Go files carrying the oak generate directive."""

    def parse_file(self, file_path: str | os.PathLike[str]) -> ParseResult:
        """Parse one file; return its structs if it carries the directive."""
        path = os.fspath(file_path)
        try:
            parsed = _parse_source(Path(path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ParseError) as exc:
            raise ParseError(f"failed to parse file {path}: {exc}") from exc

        if not parsed.has_directive:
            return ParseResult()
        return ParseResult(structs=parsed.structs(path))

    def parse_package(self, package_path: str | os.PathLike[str]) -> ParseResult:
        """Parse every ``.go`` file in a directory; collect structs from marked files."""
        root = os.fspath(package_path)
        result = ParseResult()
        try:
            entries = sorted(Path(root).iterdir(), key=lambda entry: entry.name)
        except OSError as exc:
            raise ParseError(f"failed to parse package {root}: {exc}") from exc

        parsed_files: list[tuple[str, _ParsedFile]] = []
        for entry in entries:
            if entry.is_dir() or not entry.name.endswith(".go"):
                continue
            file_path = os.path.normpath(os.path.join(root, entry.name))
            try:
                parsed = _parse_source(entry.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, ParseError) as exc:
                raise ParseError(
                    f"failed to parse package {root}: {file_path}: {exc}"
                ) from exc
            parsed_files.append((file_path, parsed))

        for file_path, parsed in parsed_files:
            if parsed.has_directive:
                result.structs.extend(parsed.structs(file_path))
        return result


def has_oak_directive(source: str) -> bool:
    """Return True if any comment in the Go source is the oak generate directive."""
    _, comments = _tokenize(source)
    return any(_is_oak_directive(comment) for comment in comments)


def extract_log_tag(tag_value: str) -> str:
    """Return the value of the ``log`` key in a struct tag literal."""
    if len(tag_value) >= 2 and tag_value[0] == "`" and tag_value[-1] == "`":
        tag_value = tag_value[1:-1]

    for part in tag_value.split(" "):
        if not part.startswith("log:"):
            continue
        colon = part.index(":")
        if colon < len(part) - 1:
            value = part[colon + 1 :]
            if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
                return value[1:-1]
    return ""


def get_absolute_path(path: str | os.PathLike[str]) -> str:
    """Return the absolute, normalised form of a path."""
    return os.path.abspath(path)


def _is_oak_directive(comment: str) -> bool:
    text = comment.strip()
    if text.startswith("//"):
        text = text[2:].strip()
    elif text.startswith("/*") and text.endswith("*/"):
        text = text[2:-2].strip()
    return text.startswith(DIRECTIVE)


def _parse_source(source: str) -> _ParsedFile:
    tokens, comments = _tokenize(source)
    reader = _SourceReader(tokens)
    package_name = reader.package_clause()
    declarations = list(reader.struct_declarations())
    return _ParsedFile(package_name, comments, declarations)


def _tokenize(source: str) -> tuple[list[_Token], list[str]]:
    tokens: list[_Token] = []
    comments: list[str] = []
    length = len(source)
    pos = 0
    line = 1

    def needs_semicolon() -> bool:
        if not tokens:
            return False
        last = tokens[-1]
        if last.kind in ("string", "number", "char"):
            return True
        if last.kind == "ident":
            return last.value not in _KEYWORDS or last.value in _SEMICOLON_KEYWORDS
        if last.kind == "op":
            return last.value in (")", "]", "}", "++", "--")
        return False

    while pos < length:
        ch = source[pos]

        if ch == "\n":
            if needs_semicolon():
                tokens.append(_Token(";", "\n", line))
            line += 1
            pos += 1
            continue

        if ch in " \t\r\ufeff":
            pos += 1
            continue

        if source.startswith("//", pos):
            end = source.find("\n", pos)
            if end == -1:
                end = length
            comments.append(source[pos:end])
            pos = end
            continue

        if source.startswith("/*", pos):
            end = source.find("*/", pos + 2)
            if end == -1:
                raise ParseError(f"line {line}: comment not terminated")
            text = source[pos : end + 2]
            comments.append(text)
            if "\n" in text:
                if needs_semicolon():
                    tokens.append(_Token(";", "\n", line))
                line += text.count("\n")
            pos = end + 2
            continue

        if ch.isalpha() or ch == "_":
            end = pos + 1
            while end < length and (source[end].isalnum() or source[end] == "_"):
                end += 1
            tokens.append(_Token("ident", source[pos:end], line))
            pos = end
            continue

        if ch.isdigit() or (ch == "." and pos + 1 < length and source[pos + 1].isdigit()):
            is_hex = source[pos : pos + 2].lower() == "0x"
            end = pos + 1
            while end < length:
                current = source[end]
                previous = source[end - 1]
                if current.isalnum() or current in "._":
                    end += 1
                elif current in "+-" and (previous in "pP" or (previous in "eE" and not is_hex)):
                    end += 1
                else:
                    break
            tokens.append(_Token("number", source[pos:end], line))
            pos = end
            continue

        if ch in "\"'":
            end = pos + 1
            while True:
                if end >= length or source[end] == "\n":
                    kind = "string" if ch == '"' else "rune"
                    raise ParseError(f"line {line}: {kind} literal not terminated")
                if source[end] == "\\":
                    end += 2
                    continue
                if source[end] == ch:
                    break
                end += 1
            tokens.append(_Token("string" if ch == '"' else "char", source[pos : end + 1], line))
            pos = end + 1
            continue

        if ch == "`":
            end = source.find("`", pos + 1)
            if end == -1:
                raise ParseError(f"line {line}: raw string literal not terminated")
            text = source[pos : end + 1]
            tokens.append(_Token("string", text, line))
            line += text.count("\n")
            pos = end + 1
            continue

        operator = next((op for op in _OPERATORS if source.startswith(op, pos)), None)
        if operator is None:
            raise ParseError(f"line {line}: illegal character {ch!r}")
        tokens.append(_Token(";" if operator == ";" else "op", operator, line))
        pos += len(operator)

    if needs_semicolon():
        tokens.append(_Token(";", "\n", line))
    return tokens, comments


class _SourceReader:
    """Walks a token stream, reading type declarations and struct bodies."""

    def __init__(self, tokens: list[_Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def package_clause(self) -> str:
        self._expect("ident", "package")
        name = self._expect_name().value
        self._expect(";")
        return name

    def struct_declarations(self) -> Iterator[tuple[str, list[FieldInfo]]]:
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            previous = self._tokens[self._pos - 1] if self._pos else None
            self._pos += 1
            is_type_switch = previous is not None and previous.kind == "op" and previous.value == "("
            if token.kind == "ident" and token.value == "type" and not is_type_switch:
                yield from self._type_declaration()

    def _type_declaration(self) -> Iterator[tuple[str, list[FieldInfo]]]:
        if not self._at("op", "("):
            yield from self._type_spec()
            return
        self._advance()
        while True:
            if self._at(";"):
                self._advance()
                continue
            if self._at("op", ")"):
                self._advance()
                return
            yield from self._type_spec()
            if not (self._at(";") or self._at("op", ")")):
                raise self._error("expected ';' or ')' after type specification")

    def _type_spec(self) -> Iterator[tuple[str, list[FieldInfo]]]:
        name = self._expect_name().value
        if self._at("op", "[") and self._looks_like_type_params():
            self._skip_balanced()
        if self._at("op", "="):
            self._advance()
        _, fields = self._parse_type()
        if fields is not None:
            yield name, fields

    def _looks_like_type_params(self) -> bool:
        first = self._peek(1)
        second = self._peek(2)
        if first is None or first.kind != "ident" or second is None:
            return False
        return not (second.kind == "op" and second.value in ("]", "."))

    def _parse_type(self) -> tuple[str, list[FieldInfo] | None]:
        token = self._advance()

        if token.kind == "op":
            if token.value == "*":
                inner, _ = self._parse_type()
                return "*" + inner, None
            if token.value == "[":
                if self._at("op", "]"):
                    self._advance()
                    element, _ = self._parse_type()
                    return "[]" + element, None
                length = self._array_length(self._pos - 1)
                element, _ = self._parse_type()
                return f"[{length}]{element}", None
            if token.value == "<-":
                self._expect("ident", "chan")
                self._parse_type()
                return "unknown", None
            if token.value == "(":
                self._parse_type()
                self._expect("op", ")")
                return "unknown", None
            raise self._error(f"unexpected {token.value!r} in type", token)

        if token.kind != "ident":
            raise self._error(f"unexpected {token.value!r} in type", token)

        if token.value == "map":
            self._expect("op", "[")
            key, _ = self._parse_type()
            self._expect("op", "]")
            value, _ = self._parse_type()
            return f"map[{key}]{value}", None
        if token.value == "chan":
            if self._at("op", "<-"):
                self._advance()
            self._parse_type()
            return "unknown", None
        if token.value == "func":
            self._skip_signature()
            return "unknown", None
        if token.value == "struct":
            return "unknown", self._struct_body()
        if token.value == "interface":
            if not self._at("op", "{"):
                raise self._error("expected '{' after interface")
            self._skip_balanced()
            return "interface{}", None
        if token.value in _KEYWORDS:
            raise self._error(f"unexpected keyword {token.value!r} in type", token)

        text = token.value
        if self._at("op", "."):
            self._advance()
            text = f"{token.value}.{self._expect_name().value}"
        if self._at("op", "["):
            self._skip_balanced()
            return "unknown", None
        return text, None

    def _array_length(self, open_index: int) -> str:
        close_index = self._matching_index(open_index)
        inner = self._tokens[open_index + 1 : close_index]
        self._pos = close_index + 1
        if len(inner) == 1 and inner[0].kind == "ident":
            return inner[0].value
        if (
            len(inner) == 3
            and inner[0].kind == "ident"
            and inner[1].kind == "op"
            and inner[1].value == "."
            and inner[2].kind == "ident"
        ):
            return f"{inner[0].value}.{inner[2].value}"
        return "unknown"

    def _skip_signature(self) -> None:
        if not self._at("op", "("):
            raise self._error("expected '(' in function type")
        self._skip_balanced()
        if self._at("op", "("):
            self._skip_balanced()
        elif self._starts_type():
            self._parse_type()

    def _starts_type(self) -> bool:
        token = self._peek()
        if token is None:
            return False
        if token.kind == "ident":
            return token.value not in _KEYWORDS or token.value in _TYPE_KEYWORDS
        return token.kind == "op" and token.value in ("*", "[", "<-", "(")

    def _struct_body(self) -> list[FieldInfo]:
        self._expect("op", "{")
        fields: list[FieldInfo] = []
        while True:
            if self._at(";"):
                self._advance()
                continue
            if self._at("op", "}"):
                self._advance()
                return fields
            fields.extend(self._field_declaration())
            if not (self._at(";") or self._at("op", "}")):
                raise self._error("expected ';' or '}' after field declaration")

    def _field_declaration(self) -> list[FieldInfo]:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of file in struct")

        if token.kind == "op" and token.value == "*":
            type_text, _ = self._parse_type()
            names, is_pointer = [type_text], True
        elif token.kind == "ident" and token.value not in _KEYWORDS:
            if self._is_embedded_field():
                type_text, _ = self._parse_type()
                names, is_pointer = [type_text], False
            else:
                names = [self._advance().value]
                while self._at("op", ","):
                    self._advance()
                    names.append(self._expect_name().value)
                is_pointer = self._at("op", "*")
                type_text, _ = self._parse_type()
        else:
            raise self._error(f"unexpected {token.value!r} in struct", token)

        tag = self._advance().value if self._at("string") else ""
        log_tag = extract_log_tag(tag) if tag else ""
        return [
            FieldInfo(name=name, type=type_text, tag=tag, log_tag=log_tag, is_pointer=is_pointer)
            for name in names
        ]

    def _is_embedded_field(self) -> bool:
        following = self._peek(1)
        if following is None or following.kind in (";", "string"):
            return True
        if following.kind != "op":
            return False
        if following.value in (".", "}"):
            return True
        if following.value == "[":
            close_index = self._matching_index(self._pos + 1)
            after = self._tokens[close_index + 1] if close_index + 1 < len(self._tokens) else None
            return after is None or after.kind in (";", "string") or (
                after.kind == "op" and after.value == "}"
            )
        return False

    def _matching_index(self, open_index: int) -> int:
        depth = 0
        for index in range(open_index, len(self._tokens)):
            token = self._tokens[index]
            if token.kind != "op":
                continue
            if token.value in _OPENERS:
                depth += 1
            elif token.value in _CLOSERS:
                depth -= 1
                if depth == 0:
                    return index
        raise self._error("unbalanced brackets", self._tokens[open_index])

    def _skip_balanced(self) -> None:
        self._pos = self._matching_index(self._pos) + 1

    def _peek(self, offset: int = 0) -> _Token | None:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _at(self, kind: str, value: str | None = None) -> bool:
        token = self._peek()
        return token is not None and token.kind == kind and (value is None or token.value == value)

    def _advance(self) -> _Token:
        token = self._peek()
        if token is None:
            raise self._error("unexpected end of file")
        self._pos += 1
        return token

    def _expect(self, kind: str, value: str | None = None) -> _Token:
        if not self._at(kind, value):
            raise self._error(f"expected {value or kind!r}")
        return self._advance()

    def _expect_name(self) -> _Token:
        token = self._peek()
        if token is None or token.kind != "ident" or token.value in _KEYWORDS:
            raise self._error("expected identifier")
        return self._advance()

    def _error(self, message: str, token: _Token | None = None) -> ParseError:
        token = token or self._peek() or (self._tokens[-1] if self._tokens else None)
        line = token.line if token is not None else 1
        return ParseError(f"line {line}: {message}")