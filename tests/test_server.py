"""Tests for xanodev.server — tool wiring, logging wrapper, resources, CLI."""

import functools
import logging

import anyio
import pytest

from xanodev import server
from xanodev.config import ServerConfig
from xanodev.errors import XanoDevError
from xanodev.tools import TOOL_NAMES


@pytest.fixture
def wired(services):
    server.set_services(services)
    yield services
    server.set_services(None)


def _call(fn, **kwargs):
    return anyio.run(functools.partial(fn, **kwargs))


class TestRegistration:
    def test_tools_listed(self):
        listed = anyio.run(server.mcp_server.list_tools)
        assert sorted(t.name for t in listed) == sorted(TOOL_NAMES)

    def test_tool_annotations(self):
        listed = {t.name: t for t in anyio.run(server.mcp_server.list_tools)}
        assert listed["validate_xanoscript"].annotations.readOnlyHint is True
        assert "quick_reference" in listed["xanoscript_docs"].description

    def test_declared_schemas_are_advertised(self):
        listed = {t.name: t for t in anyio.run(server.mcp_server.list_tools)}
        meta = listed["meta_api_docs"].inputSchema
        assert meta["required"] == ["topic"]
        assert "start" in meta["properties"]["topic"]["enum"]
        assert meta["properties"]["detail_level"]["enum"] == ["overview", "detailed", "examples"]
        mode = listed["xanoscript_docs"].inputSchema["properties"]["mode"]
        assert mode["enum"] == ["full", "quick_reference", "index"]

    def test_resources_listed(self):
        uris = {str(r.uri) for r in anyio.run(server.mcp_server.list_resources)}
        assert "xanoscript://docs/syntax" in uris
        assert "xanoscript://docs/integrations/redis" in uris
        assert len(uris) == 34


class TestToolCalls:
    def test_docs(self, wired):
        (text,) = _call(server.xanoscript_docs, topic="api")
        assert "## Authentication" in text
        assert text.endswith("Documentation version: 9.9.9")

    def test_empty_arguments_are_omitted(self, wired):
        (text,) = _call(server.xanoscript_docs, topic="", file_path="")
        assert text.startswith("# XanoScript")

    def test_file_path_returns_one_block_per_topic(self, wired):
        blocks = _call(server.xanoscript_docs, file_path="apis/a.xs")
        assert blocks[0].startswith("# XanoScript Documentation for: apis/a.xs")
        assert "Mode: full" in blocks[0]
        assert any(b.startswith("# syntax\n\n") for b in blocks[1:])
        assert len(blocks) > 2

    def test_failure_raises_domain_error(self, wired):
        with pytest.raises(XanoDevError, match="Unknown topic"):
            _call(server.xanoscript_docs, topic="nonexistent_xyz")

    def test_unknown_reference_topic_is_text(self, wired):
        (text,) = _call(server.cli_docs, topic="nonexistent_xyz")
        assert text.startswith('Error: Unknown topic "nonexistent_xyz"')

    def test_invalid_code_raises(self, wired, fake_parser):
        from xanodev.parser import RawParserError

        fake_parser.errors["bad"] = [RawParserError("oops")]
        with pytest.raises(XanoDevError, match="Found 1 error"):
            _call(server.validate_xanoscript, code="bad")

    def test_crash_is_wrapped_and_sanitized(self, wired, monkeypatch):
        def boom(name, **args):
            raise RuntimeError("cannot open /home/someone/secret.txt")

        monkeypatch.setattr(server, "_run", boom)
        with pytest.raises(XanoDevError) as exc_info:
            _call(server.mcp_version)
        msg = str(exc_info.value)
        assert msg.startswith("Internal error in mcp_version: RuntimeError:")
        assert "<path>" in msg
        assert "someone" not in msg

    def test_resource_read(self, wired):
        contents = list(anyio.run(server.mcp_server.read_resource, "xanoscript://docs/apis"))
        assert "## Authentication" in contents[0].content


class TestSanitize:
    def test_unix_and_windows_paths(self):
        exc = RuntimeError("read /tmp/a/b.md and C:\\Users\\x failed")
        assert server._sanitize_exc(exc) == "read <path> and <path> failed"


class TestLogging:
    def test_file_handler_attached_once(self, tmp_path, monkeypatch):
        monkeypatch.setattr(server, "_file_handler", None)
        log_file = tmp_path / "logs" / "server.log"
        cfg = ServerConfig(log_file=str(log_file), log_level="INFO")
        try:
            server.configure_logging(cfg)
            first = server._file_handler
            server.configure_logging(cfg)
            assert server._file_handler is first
            assert log_file.parent.is_dir()
            assert server._stderr_handler.level == logging.INFO
        finally:
            server.logger.removeHandler(server._file_handler)
            server._file_handler.close()
            server._stderr_handler.setLevel(logging.WARNING)


class TestMain:
    def test_version_flag(self, capsys, monkeypatch):
        monkeypatch.setattr(server.tools, "mcp_version", lambda: "7.7.7")
        with pytest.raises(SystemExit) as exc_info:
            server.main(["--version"])
        assert exc_info.value.code == 0
        assert "xano-developer-mcp 7.7.7" in capsys.readouterr().out
