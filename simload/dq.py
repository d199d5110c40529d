import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from . import io as io_utils
from .schema import Schema
from .trace import WarningSink


class HeaderValidationError(ValueError):
    """Raised when a file header does not satisfy its schema."""


class ColumnNotFoundError(HeaderValidationError):
    """Raised when required columns are absent from a file header.

    Carries every missing base name, in schema order, so one message can
    report all of them.
    """

    def __init__(
        self,
        missing: Iterable[str],
        source: Optional[str] = None,
        kind: Optional[str] = None,
    ):
        self.missing: Tuple[str, ...] = tuple(missing)
        self.source = source
        self.kind = kind
        message = "Missing required columns: " + ", ".join(self.missing)
        if source:
            message += f" (file: {source})"
        super().__init__(message)


_LEADING_NON_PRINTABLE = re.compile(r"^[^\x20-\x7E]+")


def clean_line(line: Optional[str]) -> str:
    """Remove a leading run of non-printable characters such as a BOM."""
    if line is None:
        return ""
    return _LEADING_NON_PRINTABLE.sub("", line, count=1)


def remove_quotes(value: str) -> str:
    """Strip one layer of matching single or double quotes."""
    if value is None or len(value) < 2:
        return value
    if value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


@dataclass(frozen=True)
class HeaderToken:
    text: str
    raw: str

    def __str__(self) -> str:
        return self.text


def tokenize_header(line: Optional[str], delimiter: str) -> List[HeaderToken]:
    """Split a raw header line into cleaned tokens, keeping the raw text.

    Empty fields are preserved, so a trailing delimiter yields a trailing
    empty token. An absent line yields no tokens.
    """
    if delimiter is None or len(delimiter) != 1:
        raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
    if line is None:
        return []

    return [
        HeaderToken(text=remove_quotes(raw).strip(), raw=raw)
        for raw in clean_line(line).split(delimiter)
    ]


def split_header(line: Optional[str], delimiter: str) -> List[str]:
    """Return cleaned column names in file order."""
    return [t.text for t in tokenize_header(line, delimiter)]


def _text(token) -> str:
    return token.text if isinstance(token, HeaderToken) else token


def find_missing(schema: Schema, tokens: Sequence) -> List[str]:
    """Base names of required fields no token matches, in schema order."""
    names = [_text(t) for t in tokens]
    missing: List[str] = []
    for f in schema.required_fields:
        if not any(f.matches(name) for name in names):
            missing.append(f.base_name)
    return missing


def find_unused(schema: Schema, tokens: Sequence) -> List[str]:
    """Non-empty tokens that match no schema field, in file order."""
    unused: List[str] = []
    for token in tokens:
        name = _text(token)
        if not name or not name.strip():
            continue
        if schema.match(name) is None:
            unused.append(name)
    return unused


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of checking one header against a schema.

    ``missing`` lists absent required base names; ``unused`` lists file
    columns no field claims. Unused columns are only computed when nothing
    is missing.
    """

    schema: Schema
    columns: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()
    unused: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing

    def raise_for_missing(self, source: Optional[str] = None) -> None:
        if self.missing:
            raise ColumnNotFoundError(self.missing, source=source, kind=self.schema.kind)


def check_header(schema: Schema, tokens: Sequence) -> ValidationOutcome:
    """Reconcile header tokens against a schema without raising."""
    columns = tuple(_text(t) for t in tokens)
    missing = find_missing(schema, columns)
    if missing:
        return ValidationOutcome(schema=schema, columns=columns, missing=tuple(missing))
    unused = find_unused(schema, columns)
    return ValidationOutcome(schema=schema, columns=columns, unused=tuple(unused))


class HeaderValidator:
    """Validate file headers for one schema, reporting unused columns to a sink."""

    def __init__(self, schema: Schema, sink: Optional[WarningSink] = None):
        self.schema = schema
        self.sink = sink

    def check_line(self, line: Optional[str], delimiter: str) -> ValidationOutcome:
        outcome = check_header(self.schema, tokenize_header(line, delimiter))
        if outcome.ok and outcome.unused and self.sink is not None:
            self.sink.emit("Unused columns: " + ", ".join(outcome.unused))
        return outcome

    def validate(self, path: str, delimiter: str) -> ValidationOutcome:
        """Read the header of path and validate it.

        - Raises ColumnNotFoundError listing every missing required column.
        - Raises io.IOErrorWithContext when the file cannot be read.
        - Emits one "Unused columns" warning when the header has extras.
        """
        line = io_utils.read_first_line(path)
        outcome = self.check_line(line, delimiter)
        outcome.raise_for_missing(source=path)
        return outcome


def validate_header(
    path: str,
    delimiter: str,
    schema: Schema,
    sink: Optional[WarningSink] = None,
) -> ValidationOutcome:
    return HeaderValidator(schema, sink).validate(path, delimiter)
