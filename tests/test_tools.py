"""Tests for xanodev.tools — argument checking, dispatch, response envelope."""

from importlib import metadata

import pytest

from xanodev import tools
from xanodev.errors import InvalidArguments
from xanodev.parser import RawParserError
from xanodev.tools import (
    TOOL_NAMES,
    ToolResult,
    XanoscriptDocsArgs,
    dispatch,
    mcp_version,
    parse_args,
    tool_definitions,
)


class TestParseArgs:
    def test_defaults(self):
        args = parse_args(XanoscriptDocsArgs, None)
        assert args.topic is None
        assert args.mode is None

    def test_unknown_field(self):
        with pytest.raises(InvalidArguments, match="bogus"):
            parse_args(XanoscriptDocsArgs, {"bogus": 1})

    def test_bad_enum(self):
        with pytest.raises(InvalidArguments) as exc_info:
            parse_args(XanoscriptDocsArgs, {"mode": "compact"})
        assert str(exc_info.value).startswith("Invalid arguments: mode:")

    def test_wrong_type(self):
        with pytest.raises(InvalidArguments, match="exclude_topics"):
            parse_args(XanoscriptDocsArgs, {"exclude_topics": "syntax"})


class TestToolResult:
    def test_single_block(self):
        assert ToolResult.ok("hi").blocks == ["hi"]

    def test_several_blocks(self):
        result = ToolResult.ok(["a", "b"])
        assert result.blocks == ["a", "b"]
        assert result.text == "a\n\n---\n\nb"

    def test_failure_is_one_block(self):
        result = ToolResult.fail("nope")
        assert not result.success
        assert result.blocks == ["nope"]


class TestDispatch:
    def test_unknown_tool(self, services):
        result = dispatch("frobnicate", {}, services)
        assert not result.success
        assert result.error.startswith("Unknown tool: frobnicate. Available tools: validate_xanoscript")

    def test_invalid_arguments(self, services):
        result = dispatch("xanoscript_docs", {"mode": 3}, services)
        assert not result.success
        assert result.error.startswith("Invalid arguments: mode")

    def test_readme(self, services):
        result = dispatch("xanoscript_docs", {}, services)
        assert result.success
        assert result.data.startswith("# XanoScript")

    def test_unknown_topic_lists_topics(self, services):
        result = dispatch("xanoscript_docs", {"topic": "nonexistent_xyz"}, services)
        assert not result.success
        assert result.error.startswith("Error retrieving XanoScript documentation: Unknown topic")
        assert "Available topics:" in result.error
        for name in ("syntax", "apis", "mcp-servers"):
            assert name in result.error

    def test_file_path_blocks(self, services):
        result = dispatch(
            "xanoscript_docs", {"file_path": "apis/users/create.xs", "mode": "quick_reference"}, services
        )
        assert result.success
        assert isinstance(result.data, list)
        assert result.data[0].startswith("# XanoScript Documentation for: apis/users/create.xs")
        assert "Mode: quick_reference" in result.data[0]
        syntax = next(b for b in result.data if b.startswith("# syntax\n\n"))
        assert "## Quick Reference" in syntax
        assert "## Filters" not in syntax

    def test_file_path_defaults_to_full(self, services):
        result = dispatch("xanoscript_docs", {"file_path": "apis/a.xs"}, services)
        assert "Mode: full" in result.data[0]
        apis = next(b for b in result.data if b.startswith("# apis\n\n"))
        assert "## Authentication" in apis

    def test_file_path_mode_from_config(self, services):
        services.config.file_path_mode = "quick_reference"
        result = dispatch("xanoscript_docs", {"file_path": "apis/a.xs"}, services)
        assert "Mode: quick_reference" in result.data[0]

    def test_missing_doc_file(self, services):
        result = dispatch("xanoscript_docs", {"topic": "tasks"}, services)
        assert not result.success
        assert "missing" in result.error

    def test_validate_valid(self, services):
        result = dispatch("validate_xanoscript", {"code": "return 1"}, services)
        assert result.success
        assert result.data == "XanoScript is valid. No syntax errors found."

    def test_validate_invalid(self, services, fake_parser):
        fake_parser.errors["bad"] = [RawParserError("oops", None, 0, 1)]
        result = dispatch("validate_xanoscript", {"code": "bad"}, services)
        assert not result.success
        assert result.error.startswith("Found 1 error(s):\n\n1. [Line 1, Column 1] oops")

    def test_validate_no_input(self, services):
        result = dispatch("validate_xanoscript", {}, services)
        assert not result.success
        assert result.error.startswith("Error: One of 'code'")

    @pytest.mark.parametrize("tool", ["meta_api_docs", "run_api_docs", "cli_docs"])
    def test_topic_required(self, services, tool):
        result = dispatch(tool, {}, services)
        assert result.error == (
            f"Error: 'topic' parameter is required. Use {tool} with topic='start' for overview."
        )

    def test_meta_api(self, services):
        result = dispatch("meta_api_docs", {"topic": "function", "detail_level": "overview"}, services)
        assert result.success
        assert "listFunctions" in result.data

    def test_meta_api_bad_detail_level(self, services):
        result = dispatch("meta_api_docs", {"topic": "function", "detail_level": "all"}, services)
        assert result.error.startswith("Invalid arguments: detail_level")

    @pytest.mark.parametrize("tool", ["meta_api_docs", "run_api_docs", "cli_docs"])
    def test_unknown_reference_topic_is_plain_text(self, services, tool):
        result = dispatch(tool, {"topic": "nonexistent_xyz"}, services)
        assert result.success
        assert result.data.startswith('Error: Unknown topic "nonexistent_xyz".\n\nAvailable topics: ')
        assert "start" in result.data

    def test_cli(self, services):
        assert dispatch("cli_docs", {"topic": "login"}, services).data.startswith(
            "# Xano CLI - Profile Management"
        )

    def test_unexpected_exception_becomes_failure(self, services, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("kaput")

        monkeypatch.setattr(tools.apidocs, "cli_docs", boom)
        result = dispatch("cli_docs", {"topic": "start"}, services)
        assert not result.success
        assert result.error == "Error retrieving CLI documentation: RuntimeError: kaput"

    def test_version(self, services, monkeypatch):
        monkeypatch.setattr(tools.metadata, "version", lambda name: "1.2.3")
        result = dispatch("mcp_version", {}, services)
        assert result.data == "1.2.3"


class TestMcpVersion:
    def test_not_installed(self, monkeypatch):
        def missing(name):
            raise metadata.PackageNotFoundError(name)

        monkeypatch.setattr(tools.metadata, "version", missing)
        assert mcp_version() == "unknown"


class TestDefinitions:
    def test_names_match_dispatch(self):
        assert [d["name"] for d in tool_definitions()] == TOOL_NAMES

    def test_annotations(self):
        for d in tool_definitions():
            assert d["annotations"]["readOnlyHint"] is True
            assert d["annotations"]["destructiveHint"] is False
            assert d["annotations"]["openWorldHint"] is False

    def test_topic_lists_generated(self):
        defs = {d["name"]: d for d in tool_definitions()}
        topic_desc = defs["xanoscript_docs"]["inputSchema"]["properties"]["topic"]["description"]
        assert "- integrations/redis: Redis caching" in topic_desc
        assert "session" in defs["run_api_docs"]["inputSchema"]["properties"]["topic"]["enum"]
        assert defs["cli_docs"]["inputSchema"]["required"] == ["topic"]
