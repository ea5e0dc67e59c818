"""Xano developer MCP server — XanoScript docs, API/CLI docs, validation.

Run with: xano-developer-mcp  (or python -m xanodev.server)
The server uses stdio transport for MCP client communication.
"""

from __future__ import annotations

import argparse
import functools
import logging
import logging.handlers
import re
import sys
import threading
import time
import traceback
from pathlib import Path
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from xanodev import tools, xanoscript
from xanodev.config import ServerConfig, load_config
from xanodev.errors import XanoDevError

mcp_server = FastMCP("xano-developer-mcp")

# ---------------------------------------------------------------------------
# Logging: stderr always, rotating file when log_file is configured
# ---------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s [%(process)d] %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger("xanodev")
logger.setLevel(logging.DEBUG)

# Stderr handler (WARNING+): visible in MCP client logs; stdout is the protocol pipe
_stderr_handler = logging.StreamHandler(sys.stderr)
_stderr_handler.setLevel(logging.WARNING)
_stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
logger.addHandler(_stderr_handler)

_file_handler: logging.Handler | None = None


def configure_logging(cfg: ServerConfig) -> None:
    """Apply the configured stderr level and attach the file log (idempotent)."""
    global _file_handler
    _stderr_handler.setLevel(cfg.log_level)
    if not cfg.log_file or _file_handler is not None:
        return
    log_path = Path(cfg.log_file).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(fh)
    _file_handler = fh
    logger.info("Server log attached to %s", log_path)


# ---------------------------------------------------------------------------
# Services: config, docs context and parser, built on first use
# ---------------------------------------------------------------------------

_services: tools.Services | None = None
_services_lock = threading.Lock()


def get_services() -> tools.Services:
    global _services
    if _services is None:
        with _services_lock:
            if _services is None:
                cfg = load_config()
                configure_logging(cfg)
                _services = tools.Services(config=cfg)
    return _services


def set_services(services: Optional[tools.Services]) -> None:
    """Replace the shared services (None resets to lazy construction)."""
    global _services
    _services = services


# ---------------------------------------------------------------------------
# Tool invocation logging: wraps every @mcp_server.tool() with timing and
# error classification. Tools are sync; each call runs in a worker thread
# via anyio.to_thread so the event loop stays responsive.
# ---------------------------------------------------------------------------

_original_tool = mcp_server.tool


def _sanitize_exc(exc: Exception) -> str:
    """Strip filesystem paths from exception messages to avoid leaking internals."""
    msg = str(exc)
    msg = re.sub(r"/(?:Users|home|tmp|var|opt|etc)/\S+", "<path>", msg)
    msg = re.sub(r"[A-Z]:\\[\w\\]+", "<path>", msg)
    return msg.strip()


def _logging_tool(**kwargs):
    """Drop-in replacement for ``mcp_server.tool()`` that adds invocation logging."""
    import anyio

    decorator = _original_tool(**kwargs)

    def wrapper(fn):
        @functools.wraps(fn)
        async def logged(*args, **kw):
            name = fn.__name__
            logger.info("TOOL %s called", name)
            t0 = time.monotonic()
            try:
                result = await anyio.to_thread.run_sync(functools.partial(fn, *args, **kw))
            except XanoDevError as exc:
                logger.warning(
                    "TOOL %s failed (%s) after %.2fs: %s",
                    name,
                    type(exc).__name__,
                    time.monotonic() - t0,
                    exc,
                )
                raise
            except Exception as exc:
                logger.error(
                    "TOOL %s crashed after %.2fs:\n%s",
                    name,
                    time.monotonic() - t0,
                    traceback.format_exc(),
                )
                raise XanoDevError(
                    f"Internal error in {name}: {type(exc).__name__}: {_sanitize_exc(exc)}"
                ) from exc
            dt = time.monotonic() - t0
            rsize = sum(len(b) for b in result) if isinstance(result, list) else 0
            logger.info("TOOL %s completed in %.2fs (%d bytes)", name, dt, rsize)
            return result

        return decorator(logged)

    return wrapper


mcp_server.tool = _logging_tool  # type: ignore[assignment]


def _run(name: str, **args: Any) -> list[str]:
    """Dispatch *name*; empty arguments count as not given. Failures raise.

    Returns one string per content block.
    """
    given = {k: v for k, v in args.items() if v is not None and v != ""}
    result = tools.dispatch(name, given, get_services())
    if not result.success:
        raise XanoDevError(result.error)
    return result.blocks


_DEFINITIONS = {d["name"]: d for d in tools.tool_definitions()}


def _tool(name: str):
    """Register a tool with the description, annotations and input schema declared in tools."""
    d = _DEFINITIONS[name]
    register = mcp_server.tool(
        name=name,
        description=d["description"],
        annotations=ToolAnnotations(**d["annotations"]),
        structured_output=False,
    )

    def decorator(fn):
        fn = register(fn)
        # Advertised schema carries topic enums and required fields; arguments
        # are still checked against the pydantic models in tools.dispatch.
        mcp_server._tool_manager.get_tool(name).parameters = d["inputSchema"]
        return fn

    return decorator


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@_tool("validate_xanoscript")
def validate_xanoscript(
    code: str = "",
    file_path: str = "",
    file_paths: list[str] | None = None,
    directory: str = "",
    pattern: str = "",
) -> list[str]:
    return _run(
        "validate_xanoscript",
        code=code,
        file_path=file_path,
        file_paths=file_paths,
        directory=directory,
        pattern=pattern,
    )


@_tool("xanoscript_docs")
def xanoscript_docs(
    topic: str = "",
    file_path: str = "",
    mode: Optional[tools.DocsMode] = None,
    exclude_topics: list[str] | None = None,
) -> list[str]:
    return _run(
        "xanoscript_docs",
        topic=topic,
        file_path=file_path,
        mode=mode,
        exclude_topics=exclude_topics,
    )


@_tool("meta_api_docs")
def meta_api_docs(
    topic: str = "", detail_level: tools.DetailLevel = "detailed", include_schemas: bool = True
) -> list[str]:
    return _run(
        "meta_api_docs", topic=topic, detail_level=detail_level, include_schemas=include_schemas
    )


@_tool("run_api_docs")
def run_api_docs(
    topic: str = "", detail_level: tools.DetailLevel = "detailed", include_schemas: bool = True
) -> list[str]:
    return _run(
        "run_api_docs", topic=topic, detail_level=detail_level, include_schemas=include_schemas
    )


@_tool("cli_docs")
def cli_docs(topic: str = "", detail_level: tools.DetailLevel = "detailed") -> list[str]:
    return _run("cli_docs", topic=topic, detail_level=detail_level)


@_tool("mcp_version")
def mcp_version() -> list[str]:
    return _run("mcp_version")


# ---------------------------------------------------------------------------
# Resources: one xanoscript://docs/<topic> per XanoScript topic
# ---------------------------------------------------------------------------


def _topic_reader(identifier: str):
    def read() -> str:
        return xanoscript.topic_resource(get_services().ctx, identifier)

    read.__name__ = "docs_" + re.sub(r"\W", "_", identifier)
    return read


def _register_resources() -> None:
    for entry in xanoscript.REGISTRY:
        mcp_server.resource(
            f"xanoscript://docs/{entry.identifier}",
            name=entry.identifier,
            description=entry.description,
            mime_type="text/markdown",
        )(_topic_reader(entry.identifier))


_register_resources()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _run_stdio() -> None:
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await mcp_server._mcp_server.run(
            read_stream,
            write_stream,
            mcp_server._mcp_server.create_initialization_options(),
        )


def main(argv: list[str] | None = None):
    """Run the Xano developer MCP server."""
    import anyio

    parser = argparse.ArgumentParser(
        prog="xano-developer-mcp",
        description="MCP server with XanoScript documentation, Xano API/CLI docs and validation.",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s {tools.mcp_version()}"
    )
    parser.parse_args(argv)

    # Fail fast on a broken config file instead of on the first tool call
    get_services()

    try:
        anyio.run(_run_stdio)
    except KeyboardInterrupt:
        logger.info("Server stopped (keyboard interrupt)")
    except Exception:
        logger.critical("Server crashed:\n%s", traceback.format_exc())
        raise


if __name__ == "__main__":
    main()
