"""Shared test fixtures for xanodev."""

import json
import textwrap
from pathlib import Path

import pytest

from xanodev.config import ServerConfig
from xanodev.context import DocsContext
from xanodev.parser import RawParserError
from xanodev.tools import Services


SYNTAX_MD = textwrap.dedent("""\
    # Syntax

    Expressions and filters.

    ## Quick Reference

    | Operator | Meaning |
    |----------|---------|
    | `~` | concat |

    ## Filters

    Long filter reference.
""")

APIS_MD = textwrap.dedent("""\
    # APIs

    Endpoint definitions.

    ## Quick Reference

    query "users" verb=GET { }

    ## Authentication

    Use auth = "user".
""")

README_MD = textwrap.dedent("""\
    # XanoScript

    Overview of the language.

    ## Quick Reference

    Start with syntax.
""")

# No Quick Reference marker: the intro up to the first section is used
FUNCTIONS_MD = textwrap.dedent("""\
    # Functions

    Reusable stacks.

    ## Inputs

    Declared in the input block.
""")


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """A small docs tree: version stamp plus a handful of topic files."""
    root = tmp_path / "docs"
    root.mkdir()
    (root / "version.json").write_text(json.dumps({"version": "9.9.9"}), encoding="utf-8")
    (root / "README.md").write_text(README_MD, encoding="utf-8")
    (root / "syntax.md").write_text(SYNTAX_MD, encoding="utf-8")
    (root / "apis.md").write_text(APIS_MD, encoding="utf-8")
    (root / "functions.md").write_text(FUNCTIONS_MD, encoding="utf-8")
    return root


@pytest.fixture
def ctx(docs_root: Path) -> DocsContext:
    return DocsContext(candidates=[docs_root])


class FakeParser:
    """Parser stand-in: errors keyed by exact source text."""

    def __init__(self, errors=None, scheme="function", fail=None):
        self.errors = errors or {}
        self.scheme = scheme
        self.fail = fail
        self.calls = []

    def classify_scheme(self, text):
        if self.fail is not None:
            raise self.fail
        return self.scheme

    def parse(self, text, scheme):
        self.calls.append((text, scheme))
        return [
            e if isinstance(e, RawParserError) else RawParserError.from_mapping(e)
            for e in self.errors.get(text, [])
        ]


@pytest.fixture
def fake_parser() -> FakeParser:
    return FakeParser()


@pytest.fixture
def services(ctx, fake_parser) -> Services:
    return Services(config=ServerConfig(), ctx=ctx, parser=fake_parser)
