"""XanoScript validation — parser errors to line/column diagnostics.

The parser reports character offsets. Diagnostics carry 0-based
line/character ranges (LSP convention); the human-readable summary shows
them 1-based. Messages are enriched with suggestions for common mistakes:
type names from other languages, reserved variables, and a few syntax
pitfalls.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from xanodev.globs import glob_match
from xanodev.parser import RawParserError, XanoscriptParser

logger = logging.getLogger("xanodev.validation")

DEFAULT_PATTERN = "**/*.xs"
DEFAULT_SOURCE = "XanoScript Parser"
DEFAULT_SPAN = 5

VALID_MESSAGE = "XanoScript is valid. No syntax errors found."
MISSING_INPUT_MESSAGE = (
    "Error: One of 'code', 'file_path', 'file_paths', or 'directory' parameter is required"
)

TYPE_ALIASES: dict[str, str] = {
    "boolean": "bool",
    "integer": "int",
    "string": "text",
    "number": "decimal",
    "float": "decimal",
    "double": "decimal",
    "array": "type[]",
    "list": "type[]",
    "object": "json",
    "map": "json",
    "dict": "json",
    "dictionary": "json",
}

RESERVED_VARIABLES: tuple[str, ...] = (
    "$response",
    "$output",
    "$input",
    "$index",
    "$auth",
    "$env",
    "$db",
    "$this",
    "$result",
)

SYNTAX_SUGGESTIONS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"else\s+if"), 'Use "elseif" (one word) instead of "else if"'),
    (re.compile(r"body\s*="), 'Use "params" instead of "body" for api.request request body'),
    (
        re.compile(r"\|default:"),
        'There is no "default" filter. Use "first_notnull" or "??" operator instead',
    ),
    (re.compile(r"boolean"), 'Use "bool" instead of "boolean" for type declaration'),
    (re.compile(r"integer(?!\s*\()"), 'Use "int" instead of "integer" for type declaration'),
    (re.compile(r"string(?!\s*\()"), 'Use "text" instead of "string" for type declaration'),
]


# ── Result types ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


@dataclass
class Diagnostic:
    range: Range
    message: str
    source: str = DEFAULT_SOURCE


@dataclass
class ValidationResult:
    """Outcome for one piece of code or one file."""

    valid: bool
    errors: list[Diagnostic] = field(default_factory=list)
    message: str = ""
    file_path: Optional[str] = None


@dataclass
class BatchResult:
    """Aggregate outcome for several files."""

    valid: bool
    total_files: int
    valid_files: int
    invalid_files: int
    results: list[ValidationResult] = field(default_factory=list)
    message: str = ""


# ── Translation ──────────────────────────────────────────────────────────


def offset_to_position(text: str, offset: int) -> Position:
    """0-based line/character of *offset* in *text*.

    >>> offset_to_position("abc\\ndef\\nghi", 5)
    Position(line=1, character=1)
    """
    prefix = text[: max(offset, 0)]
    line = prefix.count("\n")
    return Position(line, len(prefix) - (prefix.rfind("\n") + 1))


def enhance_message(message: str, text: str, line: int) -> str:
    """Append suggestions and the offending source line to a parser message."""
    lines = text.split("\n")
    error_line = lines[line] if 0 <= line < len(lines) else ""
    enhanced = message

    for alias, correct in TYPE_ALIASES.items():
        if re.search(rf"\b{alias}\b", error_line, re.IGNORECASE):
            enhanced += f'\n\n💡 Suggestion: Use "{correct}" instead of "{alias}"'
            break

    for reserved in RESERVED_VARIABLES:
        if f"var {reserved}" in error_line or f"var.update {reserved}" in error_line:
            renamed = reserved.replace("$", "$my_", 1)
            enhanced += (
                f'\n\n💡 "{reserved}" is a reserved variable name. '
                f'Try a different name like "{renamed}"'
            )
            break

    for pattern, suggestion in SYNTAX_SUGGESTIONS:
        if pattern.search(error_line) or pattern.search(text):
            enhanced += f"\n\n💡 Suggestion: {suggestion}"
            break

    if error_line.strip():
        enhanced += f"\n\nCode at line {line + 1}:\n  {error_line.strip()}"
    return enhanced


def to_diagnostic(text: str, error: RawParserError) -> Diagnostic:
    """Convert one raw parser error into a positioned, enriched diagnostic."""
    start_offset = error.start_offset if error.start_offset is not None else 0
    end_offset = error.end_offset if error.end_offset is not None else start_offset + DEFAULT_SPAN

    start = offset_to_position(text, start_offset)
    # The parser's end offset is inclusive.
    end = offset_to_position(text, end_offset + 1)
    if (end.line, end.character) < (start.line, start.character):
        end = start

    return Diagnostic(
        range=Range(start, end),
        message=enhance_message(error.message, text, start.line),
        source=error.name or DEFAULT_SOURCE,
    )


def format_errors(diagnostics: list[Diagnostic]) -> str:
    items = [
        f"{i}. [Line {d.range.start.line + 1}, Column {d.range.start.character + 1}] {d.message}"
        for i, d in enumerate(diagnostics, 1)
    ]
    return f"Found {len(diagnostics)} error(s):\n\n" + "\n".join(items)


# ── Single inputs ────────────────────────────────────────────────────────


def validate_code(
    parser: XanoscriptParser, code: str, file_path: Optional[str] = None
) -> ValidationResult:
    """Validate one piece of code. Parser failures become an invalid result."""
    try:
        scheme = parser.classify_scheme(code)
        raw_errors = parser.parse(code, scheme)
    except Exception as exc:
        logger.warning("Parser failed on %s: %s", file_path or "<code>", exc)
        return ValidationResult(False, [], f"Validation error: {exc}", file_path)

    name = os.path.basename(file_path) if file_path else ""
    if not raw_errors:
        message = f"✓ {name}: Valid" if file_path else VALID_MESSAGE
        return ValidationResult(True, [], message, file_path)

    diagnostics = [to_diagnostic(code, e) for e in raw_errors]
    prefix = f"✗ {name}: " if file_path else ""
    return ValidationResult(False, diagnostics, prefix + format_errors(diagnostics), file_path)


def _read(file_path: str) -> tuple[str, str]:
    """(content, error message) for *file_path*; exactly one is non-empty."""
    path = Path(file_path).expanduser().resolve()
    if not path.is_file():
        return "", f"File not found: {file_path}"
    try:
        return path.read_text(encoding="utf-8"), ""
    except (OSError, UnicodeDecodeError) as exc:
        return "", f"Error reading file: {exc}"


def validate_file(parser: XanoscriptParser, file_path: str) -> ValidationResult:
    content, error = _read(file_path)
    if error:
        return ValidationResult(False, [], error, file_path)
    return validate_code(parser, content, file_path)


# ── Batches ──────────────────────────────────────────────────────────────


def find_xs_files(directory: str, pattern: str = DEFAULT_PATTERN) -> list[str]:
    """All .xs files under *directory* whose relative path matches *pattern*.

    Returns absolute paths in sorted order; a missing directory yields [].
    """
    root = Path(directory).expanduser().resolve()
    if not root.is_dir():
        return []
    found = []
    for path in sorted(root.rglob("*.xs")):
        if path.is_file() and glob_match(pattern, path.relative_to(root).as_posix()):
            found.append(str(path))
    return found


def _report(results: list[ValidationResult]) -> BatchResult:
    valid = [r for r in results if r.valid]
    invalid = [r for r in results if not r.valid]

    lines = [
        f"Validated {len(results)} file(s): {len(valid)} valid, {len(invalid)} invalid",
        "",
    ]
    if invalid:
        lines.append("❌ Files with errors:")
        lines.extend(f"\n{r.message}" for r in invalid)
        lines.append("")
    if valid:
        lines.append("✅ Valid files:")
        lines.extend(f"  {r.file_path}" for r in valid)

    return BatchResult(
        valid=not invalid,
        total_files=len(results),
        valid_files=len(valid),
        invalid_files=len(invalid),
        results=results,
        message="\n".join(lines),
    )


def validate_files(parser: XanoscriptParser, file_paths: list[str]) -> BatchResult:
    return _report([validate_file(parser, p) for p in file_paths])


def validate_directory(
    parser: XanoscriptParser, directory: str, pattern: Optional[str] = None
) -> BatchResult:
    """Validate every matching .xs file under *directory*.

    No matches is not an error: the result is valid with an explanatory message.
    """
    files = find_xs_files(directory, pattern or DEFAULT_PATTERN)
    if not files:
        suffix = f" matching pattern: {pattern}" if pattern else ""
        return BatchResult(
            valid=True,
            total_files=0,
            valid_files=0,
            invalid_files=0,
            message=f"No .xs files found in directory: {directory}{suffix}",
        )
    return validate_files(parser, files)


def validate_xanoscript(
    parser: XanoscriptParser,
    code: Optional[str] = None,
    file_path: Optional[str] = None,
    file_paths: Optional[list[str]] = None,
    directory: Optional[str] = None,
    pattern: Optional[str] = None,
) -> Union[ValidationResult, BatchResult]:
    """Validate code, one file, a list of files or a directory.

    The first non-empty input wins, in that order.
    """
    if code:
        result = validate_code(parser, code)
    elif file_path:
        result = validate_file(parser, file_path)
    elif file_paths:
        return validate_files(parser, file_paths)
    elif directory:
        return validate_directory(parser, directory, pattern)
    else:
        return ValidationResult(False, [], MISSING_INPUT_MESSAGE)
    # Single results report no file_path, matching the code-only shape.
    return ValidationResult(result.valid, result.errors, result.message)
