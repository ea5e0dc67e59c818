"""Tests for xanodev.errors — hierarchy and actionable messages."""

import pytest

from xanodev.errors import (
    ConfigError,
    ConfigFileInvalid,
    DocFileMissing,
    DocsNotFound,
    InvalidArguments,
    ParserUnavailable,
    TopicNotFound,
    UnknownTool,
    XanoDevError,
)


@pytest.mark.parametrize(
    "exc",
    [
        TopicNotFound("XanoScript", "x", ["a"]),
        DocsNotFound([]),
        DocFileMissing("t", "t.md"),
        InvalidArguments(["a: b"]),
        UnknownTool("x", ["y"]),
        ParserUnavailable("gone"),
        ConfigError("bad"),
        ConfigFileInvalid("c.yaml", "oops"),
    ],
)
def test_all_derive_from_base(exc):
    assert isinstance(exc, XanoDevError)


class TestMessages:
    def test_topic_not_found(self):
        exc = TopicNotFound("CLI", "profiel", ["start", "profile"])
        assert str(exc) == 'Unknown topic "profiel".\n\nAvailable topics: start, profile'
        assert exc.domain == "CLI"

    def test_invalid_arguments(self):
        assert str(InvalidArguments(["mode: bad", "topic: bad"])) == (
            "Invalid arguments: mode: bad; topic: bad"
        )

    def test_unknown_tool(self):
        assert str(UnknownTool("x", ["a", "b"])) == "Unknown tool: x. Available tools: a, b"

    def test_docs_not_found_lists_candidates(self):
        msg = str(DocsNotFound(["/a", "/b"]))
        assert "Tried: /a, /b" in msg
        assert "XANODEV_DOCS_PATH" in msg

    def test_parser_unavailable_says_what_to_install(self):
        msg = str(ParserUnavailable("'node' not found"))
        assert "@xano/xanoscript-language-server" in msg
        assert "XANODEV_NODE_PATH" in msg

    def test_config_error_hint(self):
        assert str(ConfigError("bad", "Fix it.")) == "Configuration error: bad. Fix it."
        assert str(ConfigError("bad")) == "Configuration error: bad."

    def test_config_file_invalid_is_config_error(self):
        exc = ConfigFileInvalid("c.yaml", "oops")
        assert isinstance(exc, ConfigError)
        assert "c.yaml" in str(exc)
