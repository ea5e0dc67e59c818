"""Structured topic documents and their markdown rendering.

Two document shapes exist. API topics (Meta API, Run API) describe HTTP
endpoints, worked examples and multi-step workflows. CLI topics describe
commands with flags and arguments. Both are stored as YAML under
xanodev/data/ and rendered on demand at one of three detail levels:

  overview   headings and one-line descriptions
  detailed   parameters, request bodies, worked examples (default)
  examples   everything, including per-endpoint example requests
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from xanodev.errors import ConfigError

logger = logging.getLogger("xanodev.structured")

DETAIL_LEVELS = ("overview", "detailed", "examples")


# ---------------------------------------------------------------------------
# API documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str
    description: str = ""
    required: bool = False
    default: Any = None
    options: tuple[str, ...] = ()
    location: str = ""  # path | query | header


@dataclass(frozen=True)
class BodyProperty:
    name: str
    type: str
    description: str = ""
    required: bool = False


@dataclass(frozen=True)
class RequestBody:
    type: str
    description: str = ""
    properties: tuple[BodyProperty, ...] = ()


@dataclass(frozen=True)
class SampleRequest:
    method: str
    path: str
    headers: tuple[tuple[str, str], ...] = ()
    body: Any = None


@dataclass(frozen=True)
class Endpoint:
    method: str
    path: str
    description: str
    tool_name: str = ""
    parameters: tuple[Parameter, ...] = ()
    request_body: Optional[RequestBody] = None
    example: Optional[SampleRequest] = None


@dataclass(frozen=True)
class Example:
    title: str
    description: str
    request: SampleRequest
    response: Any = None


@dataclass(frozen=True)
class Pattern:
    name: str
    steps: tuple[str, ...]
    description: str = ""
    example: str = ""


@dataclass(frozen=True)
class ApiTopic:
    topic: str
    title: str
    description: str
    ai_hints: str = ""
    endpoints: tuple[Endpoint, ...] = ()
    examples: tuple[Example, ...] = ()
    patterns: tuple[Pattern, ...] = ()
    schemas: dict = field(default_factory=dict, hash=False)
    related_topics: tuple[str, ...] = ()


@dataclass(frozen=True)
class FormatProfile:
    """Per-API presentation settings."""

    base_url_info: str
    tool_name: str


META_API_PROFILE = FormatProfile(
    base_url_info=(
        "## Base URL\n"
        "```\n"
        "https://<your-instance-subdomain>.xano.io/api:meta/<endpoint>\n"
        "```\n"
        "Replace `<your-instance-subdomain>` with your Xano instance subdomain. "
        "Authenticate with a Metadata API access token as a Bearer token."
    ),
    tool_name="meta_api_docs",
)

RUN_API_PROFILE = FormatProfile(
    base_url_info=(
        "## Base URL\n"
        "```\n"
        "https://app.dev.xano.com/api:run/<endpoint>\n"
        "```\n"
        "**Important:** This is a fixed URL, NOT your Xano instance URL."
    ),
    tool_name="run_api_docs",
)


# ---------------------------------------------------------------------------
# CLI documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Flag:
    name: str
    type: str
    description: str = ""
    short: str = ""
    required: bool = False
    default: str = ""


@dataclass(frozen=True)
class Argument:
    name: str
    description: str = ""
    required: bool = False


@dataclass(frozen=True)
class Command:
    name: str
    description: str
    usage: str
    flags: tuple[Flag, ...] = ()
    args: tuple[Argument, ...] = ()
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class Workflow:
    name: str
    description: str
    steps: tuple[str, ...]
    example: str = ""


@dataclass(frozen=True)
class CliTopic:
    topic: str
    title: str
    description: str
    ai_hints: str = ""
    commands: tuple[Command, ...] = ()
    workflows: tuple[Workflow, ...] = ()
    related_topics: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _sample(raw: dict) -> SampleRequest:
    return SampleRequest(
        method=str(raw["method"]),
        path=str(raw["path"]),
        headers=tuple((str(k), str(v)) for k, v in (raw.get("headers") or {}).items()),
        body=raw.get("body"),
    )


def _endpoint(raw: dict) -> Endpoint:
    body = raw.get("request_body")
    return Endpoint(
        method=str(raw["method"]).upper(),
        path=str(raw["path"]),
        description=str(raw.get("description", "")),
        tool_name=str(raw.get("tool_name", "") or ""),
        parameters=tuple(
            Parameter(
                name=str(p["name"]),
                type=str(p.get("type", "string")),
                description=str(p.get("description", "")),
                required=bool(p.get("required", False)),
                default=p.get("default"),
                options=tuple(str(o) for o in p.get("enum") or ()),
                location=str(p.get("in", "") or ""),
            )
            for p in raw.get("parameters") or ()
        ),
        request_body=(
            RequestBody(
                type=str(body.get("type", "object")),
                description=str(body.get("description", "")),
                properties=tuple(
                    BodyProperty(
                        name=str(name),
                        type=str(prop.get("type", "string")),
                        description=str(prop.get("description", "") or ""),
                        required=bool(prop.get("required", False)),
                    )
                    for name, prop in (body.get("properties") or {}).items()
                ),
            )
            if body
            else None
        ),
        example=_sample(raw["example"]) if raw.get("example") else None,
    )


def parse_api_topic(raw: dict) -> ApiTopic:
    """Build an ApiTopic from a decoded YAML mapping."""
    return ApiTopic(
        topic=str(raw["topic"]),
        title=str(raw["title"]),
        description=str(raw.get("description", "")).strip(),
        ai_hints=str(raw.get("ai_hints", "") or "").strip(),
        endpoints=tuple(_endpoint(e) for e in raw.get("endpoints") or ()),
        examples=tuple(
            Example(
                title=str(e["title"]),
                description=str(e.get("description", "")),
                request=_sample(e["request"]),
                response=e.get("response"),
            )
            for e in raw.get("examples") or ()
        ),
        patterns=tuple(
            Pattern(
                name=str(p["name"]),
                steps=tuple(str(s) for s in p.get("steps") or ()),
                description=str(p.get("description", "") or ""),
                example=str(p.get("example", "") or "").rstrip("\n"),
            )
            for p in raw.get("patterns") or ()
        ),
        schemas=dict(raw.get("schemas") or {}),
        related_topics=tuple(str(t) for t in raw.get("related_topics") or ()),
    )


def parse_cli_topic(raw: dict) -> CliTopic:
    """Build a CliTopic from a decoded YAML mapping."""
    return CliTopic(
        topic=str(raw["topic"]),
        title=str(raw["title"]),
        description=str(raw.get("description", "")).strip(),
        ai_hints=str(raw.get("ai_hints", "") or "").strip(),
        commands=tuple(
            Command(
                name=str(c["name"]),
                description=str(c.get("description", "")),
                usage=str(c.get("usage", c["name"])),
                flags=tuple(
                    Flag(
                        name=str(f["name"]),
                        type=str(f.get("type", "string")),
                        description=str(f.get("description", "")),
                        short=str(f.get("short", "") or ""),
                        required=bool(f.get("required", False)),
                        default=str(f.get("default", "") or ""),
                    )
                    for f in c.get("flags") or ()
                ),
                args=tuple(
                    Argument(
                        name=str(a["name"]),
                        description=str(a.get("description", "")),
                        required=bool(a.get("required", False)),
                    )
                    for a in c.get("args") or ()
                ),
                examples=tuple(str(x) for x in c.get("examples") or ()),
            )
            for c in raw.get("commands") or ()
        ),
        workflows=tuple(
            Workflow(
                name=str(w["name"]),
                description=str(w.get("description", "")),
                steps=tuple(str(s) for s in w.get("steps") or ()),
                example=str(w.get("example", "") or "").rstrip("\n"),
            )
            for w in raw.get("workflows") or ()
        ),
        related_topics=tuple(str(t) for t in raw.get("related_topics") or ()),
    )


def load_topic_file(path: Path) -> list[dict]:
    """Load the list of topic mappings from a data YAML file.

    The file holds a top-level ``topics`` list, in presentation order.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path.name}: {e}") from e
    except OSError as e:
        raise ConfigError(f"cannot read {path.name}: {e}", "Reinstall the package.") from e

    topics = data.get("topics") if isinstance(data, dict) else None
    if not isinstance(topics, list):
        raise ConfigError(f"{path.name} must contain a top-level 'topics' list")
    logger.debug("Loaded %d topics from %s", len(topics), path)
    return topics


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _scalar(value: Any) -> str:
    """Render a YAML scalar the way it reads in JSON (true/false/null)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _format_parameter(p: Parameter) -> str:
    line = f"  - `{p.name}`: {p.type}"
    if p.required:
        line += " (required)"
    if p.default is not None:
        line += f" [default: {_scalar(p.default)}]"
    if p.options:
        line += f" [options: {', '.join(p.options)}]"
    return f"{line} - {p.description}"


def _format_endpoint(ep: Endpoint, level: str) -> str:
    lines = [f"### {ep.method} {ep.path}"]
    if ep.tool_name:
        lines.append(f"**Tool:** `{ep.tool_name}`")
    lines += ["", ep.description]

    if level == "overview":
        return "\n".join(lines)

    if ep.parameters:
        lines += ["", "**Parameters:**"]
        lines += [_format_parameter(p) for p in ep.parameters]

    if ep.request_body is not None:
        lines += ["", f"**Request Body:** `{ep.request_body.type}`"]
        for prop in ep.request_body.properties:
            req = " (required)" if prop.required else ""
            lines.append(f"  - `{prop.name}`: {prop.type}{req} - {prop.description}")

    if level == "examples" and ep.example is not None:
        lines += ["", "**Example:**", "```", f"{ep.example.method} {ep.example.path}"]
        if ep.example.body is not None:
            lines.append(_json(ep.example.body))
        lines.append("```")

    return "\n".join(lines)


def _format_example(ex: Example) -> str:
    lines = [f"### {ex.title}", "", ex.description, "", "**Request:**", "```"]
    lines.append(f"{ex.request.method} {ex.request.path}")
    lines += [f"{k}: {v}" for k, v in ex.request.headers]
    if ex.request.body is not None:
        lines += ["", _json(ex.request.body)]
    lines.append("```")
    if ex.response is not None:
        lines += ["", "**Response:**", "```json", _json(ex.response), "```"]
    return "\n".join(lines)


def _format_pattern(p: Pattern) -> str:
    lines = [f"### {p.name}"]
    if p.description:
        lines += ["", p.description]
    lines += ["", "**Steps:**"]
    lines += list(p.steps)
    if p.example:
        lines += ["", "**Example:**", "```", p.example, "```"]
    return "\n".join(lines)


def format_api_topic(
    doc: ApiTopic,
    detail_level: str = "detailed",
    include_schemas: bool = True,
    profile: FormatProfile = META_API_PROFILE,
) -> str:
    """Render an API topic as markdown."""
    sections = [f"# {doc.title}", "", doc.description]

    if doc.ai_hints:
        sections += ["", "## AI Usage Hints", doc.ai_hints]

    if doc.endpoints or doc.patterns:
        sections += ["", profile.base_url_info]

    if doc.endpoints:
        sections += ["", "## Endpoints"]
        for ep in doc.endpoints:
            sections += ["", _format_endpoint(ep, detail_level)]

    if doc.patterns:
        sections += ["", "## Workflows"]
        for p in doc.patterns:
            sections += ["", _format_pattern(p)]

    if detail_level in ("detailed", "examples") and doc.examples:
        sections += ["", "## Examples"]
        for ex in doc.examples:
            sections += ["", _format_example(ex)]

    if include_schemas and doc.schemas:
        sections += ["", "## Schemas", "", "```json", _json(doc.schemas), "```"]

    if doc.related_topics:
        sections += [
            "",
            "## Related Topics",
            f"Use `{profile.tool_name}` with topic: {', '.join(doc.related_topics)}",
        ]

    return "\n".join(sections)


def _format_command(cmd: Command, detailed: bool) -> str:
    lines = [f"### `{cmd.name}`", cmd.description, "", "```bash", cmd.usage, "```"]

    if detailed and cmd.flags:
        lines += [
            "",
            "**Flags:**",
            "| Flag | Type | Required | Description |",
            "|------|------|----------|-------------|",
        ]
        for f in cmd.flags:
            name = f"-{f.short}, --{f.name}" if f.short else f"--{f.name}"
            desc = f"{f.description} (default: {f.default})" if f.default else f.description
            lines.append(f"| `{name}` | {f.type} | {'Yes' if f.required else 'No'} | {desc} |")

    if detailed and cmd.args:
        lines += [
            "",
            "**Arguments:**",
            "| Argument | Required | Description |",
            "|----------|----------|-------------|",
        ]
        for a in cmd.args:
            lines.append(f"| `{a.name}` | {'Yes' if a.required else 'No'} | {a.description} |")

    if cmd.examples:
        lines += ["", "**Examples:**", "```bash", "\n".join(cmd.examples), "```"]

    return "\n".join(lines)


def format_cli_topic(doc: CliTopic, detail_level: str = "detailed") -> str:
    """Render a CLI topic as markdown."""
    sections = [f"# {doc.title}", "", doc.description]

    if doc.ai_hints and detail_level in ("overview", "detailed"):
        sections += ["", "## AI Usage Notes", doc.ai_hints]

    if doc.commands:
        sections += ["", "## Commands"]
        detailed = detail_level in ("detailed", "examples")
        for cmd in doc.commands:
            sections += ["", _format_command(cmd, detailed)]

    if doc.workflows and detail_level != "overview":
        sections += ["", "## Workflows"]
        for wf in doc.workflows:
            sections += ["", f"### {wf.name}", wf.description, ""]
            sections += [f"{i}. {step}" for i, step in enumerate(wf.steps, 1)]
            if wf.example:
                sections += ["", "```bash", wf.example, "```"]

    if doc.related_topics:
        sections += ["", "## Related Topics", "\n".join(f"- `{t}`" for t in doc.related_topics)]

    return "\n".join(sections)
