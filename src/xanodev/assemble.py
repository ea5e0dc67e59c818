"""Content assembly for file-backed topic registries.

Turns resolved topics into response text: full content, the quick-reference
slice of a topic, a tabular index of all topics, or a multi-topic bundle
for a workspace file path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from xanodev.context import DocsContext
from xanodev.errors import DocFileMissing
from xanodev.registry import TopicEntry, TopicRegistry

logger = logging.getLogger("xanodev.assemble")

MODES = ("full", "quick_reference", "index")

QUICK_REFERENCE_MARKER = "## Quick Reference"
SECTION_PREFIX = "## "
FALLBACK_LINES = 50
BLOCK_SEPARATOR = "\n\n---\n\n"


def version_trailer(version: str) -> str:
    return f"\n\n---\nDocumentation version: {version}"


def extract_quick_reference(content: str) -> str:
    """Return the "## Quick Reference" section of a markdown document.

    The section runs from the marker line up to (not including) the next
    level-two heading. Without a marker, everything before the first
    level-two heading after line 0 is used, or the first 50 lines when the
    document has no such heading. The result is never longer than *content*.
    """
    lines = content.split("\n")
    start = next((i for i, line in enumerate(lines) if line.startswith(QUICK_REFERENCE_MARKER)), -1)

    if start == -1:
        first_section = next(
            (i for i, line in enumerate(lines) if i > 0 and line.startswith(SECTION_PREFIX)), -1
        )
        end = first_section if first_section > 0 else FALLBACK_LINES
        return "\n".join(lines[:end]).rstrip()

    end = next(
        (i for i in range(start + 1, len(lines)) if lines[i].startswith(SECTION_PREFIX)),
        len(lines),
    )
    return "\n".join(lines[start:end]).rstrip()


def render_content(content: str, mode: str) -> str:
    if mode == "quick_reference":
        return extract_quick_reference(content)
    return content


def render_index(ctx: DocsContext, registry: TopicRegistry, tool_name: str) -> str:
    """Markdown table of every topic: name, aliases, description, size."""
    lines = [
        f"# {registry.domain} Documentation Index",
        "",
        f"Version: {ctx.version}",
        "",
        "| Topic | Aliases | Description | Size |",
        "|-------|---------|-------------|------|",
    ]
    for entry in registry:
        aliases = ", ".join(registry.aliases_for(entry.identifier)[:3]) or "-"
        size_kb = ctx.size(entry.reference) / 1024
        lines.append(
            f"| {entry.identifier} | {aliases} | {entry.description} | {size_kb:.1f} KB |"
        )
    lines += [
        "",
        f'Use {tool_name}(topic="<topic>") for a topic, or '
        f'{tool_name}(file_path="<path>") for everything relevant to a file.',
    ]
    return "\n".join(lines)


def assemble_topic(ctx: DocsContext, entry: TopicEntry, mode: str) -> str:
    """Single-topic text with the version trailer.

    A missing backing file propagates as DocFileMissing.
    """
    content = ctx.read(entry.reference, entry.identifier)
    return render_content(content, mode) + version_trailer(ctx.version)


@dataclass
class DocsBundle:
    """Multi-topic response for a workspace file path."""

    title: str
    file_path: str
    mode: str
    version: str
    topics: list[tuple[str, str]] = field(default_factory=list)

    @property
    def header(self) -> str:
        names = ", ".join(name for name, _ in self.topics) or "(none)"
        return (
            f"# {self.title} for: {self.file_path}\n\n"
            f"Matched topics: {names}\n"
            f"Mode: {self.mode}\n"
            f"Version: {self.version}"
        )

    @property
    def blocks(self) -> list[str]:
        """Header block first, then one labelled block per topic."""
        return [self.header] + [f"# {name}\n\n{content}" for name, content in self.topics]

    @property
    def text(self) -> str:
        return BLOCK_SEPARATOR.join(self.blocks)


def assemble_bundle(
    ctx: DocsContext,
    registry: TopicRegistry,
    file_path: str,
    topics: list[str],
    mode: str,
    title: str,
) -> DocsBundle:
    """Collect content for several topics.

    A topic whose backing file is missing gets an inline placeholder so the
    remaining topics are still delivered.
    """
    bundle = DocsBundle(title=title, file_path=file_path, mode=mode, version=ctx.version)
    for name in topics:
        entry = registry.get(name)
        if entry is None:
            continue
        try:
            content = render_content(ctx.read(entry.reference, name), mode)
        except DocFileMissing:
            logger.warning("Docs file %s for topic %s is missing", entry.reference, name)
            content = f"[Error reading {name} ({entry.reference}): file not found]"
        bundle.topics.append((name, content))
    return bundle
