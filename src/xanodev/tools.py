"""Tool dispatch — argument validation, routing, and the response envelope.

Every tool call goes through dispatch(): arguments are checked against a
pydantic model first, then routed to the component. Errors never escape;
they come back as a failed ToolResult whose text tells the caller what to
do next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib import metadata
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from xanodev import apidocs, validation, xanoscript
from xanodev.assemble import BLOCK_SEPARATOR, DocsBundle
from xanodev.config import ServerConfig
from xanodev.context import DocsContext
from xanodev.errors import InvalidArguments, TopicNotFound, UnknownTool, XanoDevError
from xanodev.parser import NodeParser, XanoscriptParser

logger = logging.getLogger("xanodev.tools")

DISTRIBUTION = "xano-developer-mcp"

DetailLevel = Literal["overview", "detailed", "examples"]
DocsMode = Literal["full", "quick_reference", "index"]


# ── Argument models ──────────────────────────────────────────────────────


class _Args(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)


class ValidateXanoscriptArgs(_Args):
    code: Optional[str] = None
    file_path: Optional[str] = None
    file_paths: Optional[list[str]] = None
    directory: Optional[str] = None
    pattern: Optional[str] = None


class XanoscriptDocsArgs(_Args):
    topic: Optional[str] = None
    file_path: Optional[str] = None
    mode: Optional[DocsMode] = None
    exclude_topics: Optional[list[str]] = None


class ApiDocsArgs(_Args):
    # Optional so a missing topic gets a pointed hint instead of a schema error
    topic: Optional[str] = None
    detail_level: DetailLevel = "detailed"
    include_schemas: bool = True


class CliDocsArgs(_Args):
    topic: Optional[str] = None
    detail_level: DetailLevel = "detailed"


class NoArgs(_Args):
    pass


def parse_args(model: type[BaseModel], raw: Optional[dict]) -> Any:
    """Validate *raw* against *model*; raises InvalidArguments listing each issue."""
    try:
        return model.model_validate(raw or {})
    except ValidationError as exc:
        issues = [
            f"{'.'.join(str(p) for p in err['loc']) or '(root)'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidArguments(issues) from exc


# ── Results ──────────────────────────────────────────────────────────────


@dataclass
class ToolResult:
    """Outcome of one tool call: text blocks on success, one message on failure."""

    success: bool
    data: Union[str, list[str], None] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Union[str, list[str]]) -> "ToolResult":
        return cls(True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ToolResult":
        return cls(False, error=error)

    @property
    def blocks(self) -> list[str]:
        """Content blocks in delivery order; a failure is a single block."""
        if not self.success:
            return [self.error or ""]
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data or ""]

    @property
    def text(self) -> str:
        """All content as one string."""
        return BLOCK_SEPARATOR.join(self.blocks)


# ── Services ─────────────────────────────────────────────────────────────


@dataclass
class Services:
    """Collaborators shared by every tool call."""

    config: ServerConfig = field(default_factory=ServerConfig)
    ctx: Optional[DocsContext] = None
    parser: Optional[XanoscriptParser] = None

    def __post_init__(self):
        if self.ctx is None:
            self.ctx = DocsContext(self.config.docs_path or None)
        if self.parser is None:
            self.parser = NodeParser(self.config.parser)


def mcp_version() -> str:
    """Installed version of this server, or "unknown" when not installed."""
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "unknown"


# ── Handlers ─────────────────────────────────────────────────────────────


def _validate_xanoscript(args: ValidateXanoscriptArgs, services: Services) -> ToolResult:
    result = validation.validate_xanoscript(
        services.parser,
        code=args.code,
        file_path=args.file_path,
        file_paths=args.file_paths,
        directory=args.directory,
        pattern=args.pattern,
    )
    if result.valid:
        return ToolResult.ok(result.message)
    return ToolResult.fail(result.message)


def _xanoscript_docs(args: XanoscriptDocsArgs, services: Services) -> ToolResult:
    out = xanoscript.xanoscript_docs(
        services.ctx,
        topic=args.topic,
        file_path=args.file_path,
        mode=args.mode,
        exclude_topics=args.exclude_topics,
        file_path_mode=services.config.file_path_mode,
    )
    if isinstance(out, DocsBundle):
        return ToolResult.ok(out.blocks)
    return ToolResult.ok(out)


def _topic_required(tool: str) -> ToolResult:
    return ToolResult.fail(
        f"Error: 'topic' parameter is required. Use {tool} with topic='start' for overview."
    )


def _reference_text(render: Callable[..., str], *args: Any) -> ToolResult:
    """Render reference docs; an unknown topic is answered with the topic list."""
    try:
        return ToolResult.ok(render(*args))
    except TopicNotFound as exc:
        return ToolResult.ok(f"Error: {exc}")


def _meta_api_docs(args: ApiDocsArgs, services: Services) -> ToolResult:
    if not args.topic:
        return _topic_required("meta_api_docs")
    return _reference_text(apidocs.meta_api_docs, args.topic, args.detail_level, args.include_schemas)


def _run_api_docs(args: ApiDocsArgs, services: Services) -> ToolResult:
    if not args.topic:
        return _topic_required("run_api_docs")
    return _reference_text(apidocs.run_api_docs, args.topic, args.detail_level, args.include_schemas)


def _cli_docs(args: CliDocsArgs, services: Services) -> ToolResult:
    if not args.topic:
        return _topic_required("cli_docs")
    return _reference_text(apidocs.cli_docs, args.topic, args.detail_level)


def _mcp_version(args: NoArgs, services: Services) -> ToolResult:
    return ToolResult.ok(mcp_version())


# name -> (argument model, handler, prefix for domain errors)
_HANDLERS = {
    "validate_xanoscript": (ValidateXanoscriptArgs, _validate_xanoscript, "Validation error"),
    "xanoscript_docs": (
        XanoscriptDocsArgs,
        _xanoscript_docs,
        "Error retrieving XanoScript documentation",
    ),
    "meta_api_docs": (ApiDocsArgs, _meta_api_docs, "Error retrieving API documentation"),
    "run_api_docs": (ApiDocsArgs, _run_api_docs, "Error retrieving Run API documentation"),
    "cli_docs": (CliDocsArgs, _cli_docs, "Error retrieving CLI documentation"),
    "mcp_version": (NoArgs, _mcp_version, "Error"),
}

TOOL_NAMES = list(_HANDLERS)


def dispatch(name: str, raw_args: Optional[dict], services: Services) -> ToolResult:
    """Run tool *name*. Never raises; failures come back as ToolResult.fail."""
    if name not in _HANDLERS:
        return ToolResult.fail(str(UnknownTool(name, TOOL_NAMES)))
    model, handler, prefix = _HANDLERS[name]
    try:
        args = parse_args(model, raw_args)
    except InvalidArguments as exc:
        return ToolResult.fail(str(exc))
    try:
        return handler(args, services)
    except XanoDevError as exc:
        logger.info("Tool %s failed: %s", name, exc)
        return ToolResult.fail(f"{prefix}: {exc}")
    except Exception as exc:
        logger.exception("Tool %s crashed", name)
        return ToolResult.fail(f"{prefix}: {type(exc).__name__}: {exc}")


# ── Definitions ──────────────────────────────────────────────────────────

_READ_ONLY = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": False,
}

_DETAIL_LEVEL_SCHEMA = {
    "type": "string",
    "enum": ["overview", "detailed", "examples"],
    "description": (
        "overview = brief summaries, detailed = full parameter lists (default), "
        "examples = detailed plus request/response examples"
    ),
}


def _topic_list() -> str:
    return "\n".join(
        f"- {e.identifier}: {e.description}"
        for e in xanoscript.REGISTRY
    )


def tool_definitions() -> list[dict]:
    """MCP tool listings: name, description, JSON input schema, annotations."""
    return [
        {
            "name": "validate_xanoscript",
            "description": (
                "Validate XanoScript code for syntax errors. Supports multiple input methods:\n"
                "- code: Raw XanoScript code as a string\n"
                "- file_path: Path to a single .xs file (easier than escaping code!)\n"
                "- file_paths: Array of file paths for batch validation\n"
                "- directory: Validate all .xs files in a directory\n\n"
                "Returns errors with line/column positions and helpful suggestions "
                "for common mistakes. The object type is detected from the code."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "code": {"type": "string", "description": "XanoScript code to validate"},
                    "file_path": {"type": "string", "description": "Path to one .xs file"},
                    "file_paths": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Several .xs files; returns a per-file summary",
                    },
                    "directory": {
                        "type": "string",
                        "description": "Validate every .xs file under this directory",
                    },
                    "pattern": {
                        "type": "string",
                        "description": "Glob filter for 'directory' (default: \"**/*.xs\")",
                    },
                },
                "required": [],
            },
            "annotations": dict(_READ_ONLY),
        },
        {
            "name": "xanoscript_docs",
            "description": (
                "Get XanoScript programming language documentation for AI code generation. "
                "Call without parameters for the overview (README). Use 'topic' for one "
                "topic, or 'file_path' for every topic relevant to the file you are editing. "
                "Use mode='quick_reference' for compact output, mode='index' for a topic table."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "topic": {
                        "type": "string",
                        "description": "Documentation topic. Available:\n" + _topic_list(),
                    },
                    "file_path": {
                        "type": "string",
                        "description": (
                            "File being edited (e.g. 'apis/users/create.xs'). "
                            "Returns all relevant docs for that file type."
                        ),
                    },
                    "mode": {
                        "type": "string",
                        "enum": ["full", "quick_reference", "index"],
                        "description": (
                            "full = complete documentation, quick_reference = Quick Reference "
                            "sections only, index = table of topics with sizes"
                        ),
                    },
                    "exclude_topics": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Topics to leave out of a file_path response",
                    },
                },
                "required": [],
            },
            "annotations": dict(_READ_ONLY),
        },
        {
            "name": "meta_api_docs",
            "description": (
                "Get documentation for the Xano Meta API, the headless API for managing "
                "workspaces, tables, APIs, functions and more. Topics:\n"
                + apidocs.META_API.describe()
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "topic": {"type": "string", "enum": apidocs.META_API.names()},
                    "detail_level": dict(_DETAIL_LEVEL_SCHEMA),
                    "include_schemas": {
                        "type": "boolean",
                        "description": "Include JSON schemas for requests and responses",
                    },
                },
                "required": ["topic"],
            },
            "annotations": dict(_READ_ONLY),
        },
        {
            "name": "run_api_docs",
            "description": (
                "Get documentation for the Xano Run API, which executes XanoScript jobs and "
                "services and manages their sessions. Its base URL is fixed. Topics:\n"
                + apidocs.RUN_API.describe()
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "topic": {"type": "string", "enum": apidocs.RUN_API.names()},
                    "detail_level": dict(_DETAIL_LEVEL_SCHEMA),
                    "include_schemas": {
                        "type": "boolean",
                        "description": "Include JSON schemas for requests and responses",
                    },
                },
                "required": ["topic"],
            },
            "annotations": dict(_READ_ONLY),
        },
        {
            "name": "cli_docs",
            "description": (
                "Get documentation for the Xano CLI: profiles, workspaces, branches, "
                "functions, runs and static hosting. Topics:\n" + apidocs.CLI.describe()
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "topic": {"type": "string", "enum": apidocs.CLI.names()},
                    "detail_level": dict(_DETAIL_LEVEL_SCHEMA),
                },
                "required": ["topic"],
            },
            "annotations": dict(_READ_ONLY),
        },
        {
            "name": "mcp_version",
            "description": "Get the installed version of the Xano Developer MCP server.",
            "inputSchema": {"type": "object", "properties": {}, "required": []},
            "annotations": dict(_READ_ONLY),
        },
    ]
