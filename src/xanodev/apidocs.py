"""Meta API, Run API and CLI documentation lookups.

Each domain is a StructuredDocs: a YAML file of topic documents plus a
keyword alias map, resolved through the shared TopicRegistry engine.
Documents are loaded on first use.
"""

from __future__ import annotations

import functools
from typing import Callable

from xanodev import paths
from xanodev.registry import TopicEntry, TopicRegistry
from xanodev.structured import (
    META_API_PROFILE,
    RUN_API_PROFILE,
    ApiTopic,
    CliTopic,
    FormatProfile,
    format_api_topic,
    format_cli_topic,
    load_topic_file,
    parse_api_topic,
    parse_cli_topic,
)


class StructuredDocs:
    """A registry of structured topic documents backed by one YAML file."""

    def __init__(
        self,
        domain: str,
        filename: str,
        parse: Callable[[dict], object],
        aliases: dict[str, str],
    ):
        self.domain = domain
        self.filename = filename
        self._parse = parse
        self._aliases = aliases

    @functools.cached_property
    def _loaded(self) -> tuple[TopicRegistry, dict[str, object]]:
        docs = {}
        for raw in load_topic_file(paths.data_dir() / self.filename):
            doc = self._parse(raw)
            docs[doc.topic] = doc
        registry = TopicRegistry(
            self.domain,
            (TopicEntry(name, name, (), doc.title) for name, doc in docs.items()),
            aliases=self._aliases,
        )
        return registry, docs

    @property
    def registry(self) -> TopicRegistry:
        return self._loaded[0]

    def names(self) -> list[str]:
        return self.registry.names()

    def describe(self) -> str:
        """One line per topic, for tool descriptions."""
        return "\n".join(f"- {e.identifier}: {e.description}" for e in self.registry)

    def lookup(self, topic: str):
        """Resolve *topic* (exact, alias, partial) to its document.

        Raises TopicNotFound listing every topic.
        """
        entry = self.registry.resolve(topic)
        return self._loaded[1][entry.reference]


META_API = StructuredDocs(
    "Meta API",
    "meta_api.yaml",
    parse_api_topic,
    {
        "overview": "start",
        "getting_started": "start",
        "auth": "authentication",
        "token": "authentication",
        "workspaces": "workspace",
        "api_group": "apigroup",
        "apis": "api",
        "endpoint": "api",
        "endpoints": "api",
        "tables": "table",
        "functions": "function",
        "tasks": "task",
        "agents": "agent",
        "tools": "tool",
        "mcp": "mcp_server",
        "branches": "branch",
        "files": "file",
        "upload": "file",
        "logs": "history",
        "workflow": "workflows",
    },
)

RUN_API = StructuredDocs(
    "Run API",
    "run_api.yaml",
    parse_api_topic,
    {
        "overview": "start",
        "getting_started": "start",
        "exec": "run",
        "execute": "run",
        "sessions": "session",
        "logs": "history",
        "records": "data",
        "workflow": "workflows",
    },
)

CLI = StructuredDocs(
    "CLI",
    "cli.yaml",
    parse_cli_topic,
    {
        "overview": "start",
        "install": "start",
        "profiles": "profile",
        "auth": "profile",
        "login": "profile",
        "workspaces": "workspace",
        "branches": "branch",
        "functions": "function",
        "exec": "run",
        "static": "static_host",
        "hosting": "static_host",
        "integrations": "integration",
    },
)


def _api_docs(
    docs: StructuredDocs,
    profile: FormatProfile,
    topic: str,
    detail_level: str,
    include_schemas: bool,
) -> str:
    doc: ApiTopic = docs.lookup(topic)
    return format_api_topic(doc, detail_level, include_schemas, profile)


def meta_api_docs(topic: str, detail_level: str = "detailed", include_schemas: bool = True) -> str:
    """Meta API documentation for one topic."""
    return _api_docs(META_API, META_API_PROFILE, topic, detail_level, include_schemas)


def run_api_docs(topic: str, detail_level: str = "detailed", include_schemas: bool = True) -> str:
    """Run API documentation for one topic."""
    return _api_docs(RUN_API, RUN_API_PROFILE, topic, detail_level, include_schemas)


def cli_docs(topic: str, detail_level: str = "detailed") -> str:
    """Xano CLI documentation for one topic."""
    doc: CliTopic = CLI.lookup(topic)
    return format_cli_topic(doc, detail_level)
