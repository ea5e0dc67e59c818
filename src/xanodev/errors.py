"""Exception hierarchy for the Xano developer server.

Every error message includes: what happened, why, and what to do next.
This allows LLM clients to understand failures and take corrective action.
"""

from __future__ import annotations


class XanoDevError(Exception):
    """Base class for all xanodev errors."""


class TopicNotFound(XanoDevError):
    """A topic name did not resolve in a documentation registry."""

    def __init__(self, domain: str, query: str, available: list[str]):
        super().__init__(
            f'Unknown topic "{query}".\n\nAvailable topics: {", ".join(available)}'
        )
        self.domain = domain
        self.query = query
        self.available = available


class DocsNotFound(XanoDevError):
    """No documentation directory could be located."""

    def __init__(self, candidates: list[str]):
        tried = ", ".join(candidates) if candidates else "(none)"
        super().__init__(
            f"XanoScript documentation directory not found. Tried: {tried}. "
            f"Set XANODEV_DOCS_PATH to a directory containing version.json "
            f"and the topic markdown files."
        )
        self.candidates = candidates


class DocFileMissing(XanoDevError):
    """A registry entry points at a file that does not exist."""

    def __init__(self, topic: str, path: str):
        super().__init__(
            f"Documentation file for topic '{topic}' is missing ({path}). "
            f"The installed docs may be incomplete. Reinstall the package "
            f"or point XANODEV_DOCS_PATH at a complete docs tree."
        )
        self.topic = topic
        self.path = path


class InvalidArguments(XanoDevError):
    """Tool arguments failed schema validation."""

    def __init__(self, issues: list[str]):
        super().__init__(f"Invalid arguments: {'; '.join(issues)}")
        self.issues = issues


class UnknownTool(XanoDevError):
    """The client asked for a tool this server does not expose."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(
            f"Unknown tool: {name}. Available tools: {', '.join(available)}"
        )
        self.name = name
        self.available = available


class ParserUnavailable(XanoDevError):
    """The external XanoScript parser could not be run."""

    def __init__(self, detail: str):
        super().__init__(
            f"XanoScript parser unavailable: {detail}. "
            f"Install Node.js and the @xano/xanoscript-language-server package, "
            f"then set XANODEV_NODE_PATH to the node_modules directory that contains it."
        )
        self.detail = detail


class ConfigError(XanoDevError):
    """Server configuration is inconsistent."""

    def __init__(self, detail: str, hint: str = ""):
        msg = f"Configuration error: {detail}."
        if hint:
            msg += f" {hint}"
        super().__init__(msg)
        self.detail = detail
        self.hint = hint


class ConfigFileInvalid(ConfigError):
    """The YAML config file could not be parsed."""

    def __init__(self, path: str, detail: str):
        super().__init__(
            f"failed to parse '{path}': {detail}",
            "Fix the YAML syntax or unset XANODEV_CONFIG to run with defaults.",
        )
        self.path = path
