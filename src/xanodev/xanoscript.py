"""XanoScript language documentation — topic table, keyword aliases, lookup.

Each topic is backed by a markdown file under the docs root and carries
glob patterns describing which workspace files it is relevant to, e.g.
"apis/**/*.xs" for API endpoint definitions. The syntax topic is the
foundation for every .xs file and is always included for a file path.
"""

from __future__ import annotations

from typing import Optional, Union

from xanodev.assemble import (
    DocsBundle,
    assemble_bundle,
    assemble_topic,
    render_index,
)
from xanodev.context import DocsContext
from xanodev.registry import TopicEntry, TopicRegistry

TOOL_NAME = "xanoscript_docs"
FOUNDATIONAL_TOPIC = "syntax"
INDEX_TOPIC = "readme"

_CORE = ("functions/**/*.xs", "apis/**/*.xs")

# (topic, file, applicability patterns, description) in presentation order
_TOPICS: list[tuple[str, str, tuple[str, ...], str]] = [
    ("readme", "README.md", (), "XanoScript overview, workspace structure, and quick reference"),
    ("cheatsheet", "cheatsheet.md", ("**/*.xs",), "Quick reference for 20 most common XanoScript patterns"),
    ("syntax", "syntax.md", ("**/*.xs",), "Expressions, operators, and filters for all XanoScript code"),
    ("quickstart", "quickstart.md", ("**/*.xs",), "Common patterns, quick reference, and common mistakes to avoid"),
    ("types", "types.md", _CORE + ("tools/**/*.xs", "agents/**/*.xs"), "Data types, input blocks, and validation"),
    ("tables", "tables.md", ("tables/*.xs",), "Database schema definitions with indexes and relationships"),
    ("functions", "functions.md", ("functions/**/*.xs",), "Reusable function stacks with inputs and responses"),
    ("apis", "apis.md", ("apis/**/*.xs",), "HTTP endpoint definitions with authentication and CRUD patterns"),
    ("tasks", "tasks.md", ("tasks/*.xs",), "Scheduled and cron jobs"),
    ("triggers", "triggers.md", ("triggers/**/*.xs",), "Event-driven handlers (table, realtime, workspace, agent, MCP)"),
    ("database", "database.md", _CORE + ("tasks/*.xs", "tools/**/*.xs"), "All db.* operations: query, get, add, edit, patch, delete"),
    ("agents", "agents.md", ("agents/**/*.xs",), "AI agent configuration with LLM providers and tools"),
    ("tools", "tools.md", ("tools/**/*.xs",), "AI tools for agents and MCP servers"),
    ("mcp-servers", "mcp-servers.md", ("mcp_servers/**/*.xs",), "MCP server definitions exposing tools"),
    ("unit-testing", "unit-testing.md", _CORE + ("middleware/**/*.xs",), "Unit tests, mocks, and assertions within functions, APIs, and middleware"),
    ("workflow-tests", "workflow-tests.md", ("workflow_test/**/*.xs",), "End-to-end workflow tests with data source selection and tags"),
    ("integrations", "integrations.md", _CORE + ("tasks/*.xs",), "External service integrations index - see sub-topics for details"),
    ("integrations/cloud-storage", "integrations/cloud-storage.md", (), "AWS S3, Azure Blob, and GCP Storage operations"),
    ("integrations/search", "integrations/search.md", (), "Elasticsearch, OpenSearch, and Algolia search operations"),
    ("integrations/redis", "integrations/redis.md", (), "Redis caching, rate limiting, and queue operations"),
    ("integrations/external-apis", "integrations/external-apis.md", (), "HTTP requests with api.request patterns"),
    ("integrations/utilities", "integrations/utilities.md", (), "Local storage, email, zip, and Lambda utilities"),
    ("frontend", "frontend.md", ("static/**/*",), "Static frontend development and deployment"),
    ("run", "run.md", ("run/**/*.xs",), "Run job and service configurations for the Xano Job Runner"),
    ("addons", "addons.md", ("addons/*.xs",) + _CORE, "Reusable subqueries for fetching related data"),
    ("debugging", "debugging.md", ("**/*.xs",), "Logging, inspecting, and debugging XanoScript execution"),
    ("performance", "performance.md", _CORE, "Performance optimization best practices"),
    ("realtime", "realtime.md", _CORE + ("triggers/**/*.xs",), "Real-time channels and events for push updates"),
    ("schema", "schema.md", _CORE, "Runtime schema parsing and validation"),
    ("security", "security.md", _CORE, "Security best practices for authentication and authorization"),
    ("streaming", "streaming.md", _CORE, "Streaming data from files, requests, and responses"),
    ("middleware", "middleware.md", ("middleware/**/*.xs",), "Request/response interceptors for functions, queries, tasks, and tools"),
    ("branch", "branch.md", ("branch.xs",), "Branch-level settings: middleware, history retention, visual styling"),
    ("workspace", "workspace.md", ("workspace.xs",), "Workspace-level settings: environment variables, preferences, realtime"),
]

# Keyword → topic. Targets may be other aliases; chains end at a topic.
KEYWORD_ALIASES: dict[str, str] = {
    # endpoints
    "api": "apis",
    "api_query": "apis",
    "endpoint": "apis",
    "endpoints": "apis",
    "query": "apis",
    # functions
    "func": "functions",
    "function": "functions",
    # tables
    "table": "tables",
    "schemas": "tables",
    # tasks
    "task": "tasks",
    "cron": "tasks",
    "scheduled": "tasks",
    "trigger": "triggers",
    # ai
    "agent": "agents",
    "ai_agent": "agents",
    "tool": "tools",
    "mcp": "mcp-servers",
    "mcp_server": "mcp-servers",
    "mcp_servers": "mcp-servers",
    # language reference
    "reference": "syntax",
    "ref": "syntax",
    "statements": "syntax",
    "stack": "syntax",
    "expr": "syntax",
    "expression": "syntax",
    "expressions": "syntax",
    "filters": "syntax",
    "pipes": "syntax",
    "operators": "syntax",
    "type": "types",
    "input": "types",
    "inputs": "types",
    "params": "types",
    "parameters": "types",
    "start": "quickstart",
    "tips": "cheatsheet",
    "tip": "tips",
    "tricks": "tips",
    # data
    "db": "database",
    "db_query": "database",
    "filter": "database",
    "where": "database",
    "query_filter": "database",
    # testing
    "test": "unit-testing",
    "tests": "test",
    "testing": "test",
    "unit_test": "test",
    "unit_testing": "test",
    "workflow": "workflow-tests",
    "workflows": "workflow",
    "workflow_test": "workflow",
    "workflow_tests": "workflow",
    # integrations
    "s3": "integrations/cloud-storage",
    "storage": "integrations/cloud-storage",
    "elasticsearch": "integrations/search",
    "algolia": "integrations/search",
    "cache": "integrations/redis",
    "http": "integrations/external-apis",
    "api_request": "integrations/external-apis",
    # misc
    "ui": "frontend",
    "static": "frontend",
    "debug": "debugging",
    "auth": "security",
    "websocket": "realtime",
    "channels": "realtime",
}

REGISTRY = TopicRegistry(
    "XanoScript",
    (TopicEntry(name, ref, patterns, desc) for name, ref, patterns, desc in _TOPICS),
    aliases=KEYWORD_ALIASES,
    foundational=FOUNDATIONAL_TOPIC,
    index_topic=INDEX_TOPIC,
)


def topics_for_path(file_path: str, exclude_topics: Optional[list[str]] = None) -> list[str]:
    """Topics relevant to *file_path*, minus any excluded by the caller."""
    topics = REGISTRY.match_path(file_path)
    if exclude_topics:
        excluded = {t.strip().lower() for t in exclude_topics}
        topics = [t for t in topics if t.lower() not in excluded]
    return topics


def xanoscript_docs(
    ctx: DocsContext,
    topic: Optional[str] = None,
    file_path: Optional[str] = None,
    mode: Optional[str] = None,
    exclude_topics: Optional[list[str]] = None,
    file_path_mode: str = "full",
) -> Union[str, DocsBundle]:
    """Look up XanoScript documentation.

    - no arguments: the README with the version trailer
    - topic: one topic (aliases and partial names accepted), full by default
    - file_path: every topic relevant to the path, full by default (the
      file_path_mode setting can change that); returns a DocsBundle with one
      block per topic
    - mode="index": a table of all topics instead of content

    file_path wins when both file_path and topic are given.
    Raises TopicNotFound for an unresolvable topic, DocFileMissing when a
    single topic's file is absent.
    """
    if mode == "index":
        if topic and topic.strip() and not file_path:
            REGISTRY.resolve(topic)
        return render_index(ctx, REGISTRY, TOOL_NAME)

    if file_path and file_path.strip():
        effective = mode or file_path_mode
        return assemble_bundle(
            ctx,
            REGISTRY,
            file_path,
            topics_for_path(file_path, exclude_topics),
            effective,
            title="XanoScript Documentation",
        )

    if topic and topic.strip():
        return assemble_topic(ctx, REGISTRY.resolve(topic), mode or "full")

    return assemble_topic(ctx, REGISTRY.resolve(INDEX_TOPIC), "full")


def topic_resource(ctx: DocsContext, identifier: str) -> str:
    """Full content of one topic for the xanoscript://docs/{topic} resource."""
    return assemble_topic(ctx, REGISTRY.resolve(identifier), "full")
