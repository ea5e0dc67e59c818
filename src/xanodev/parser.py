"""Boundary to the external XanoScript parser.

The real parser is the @xano/xanoscript-language-server package, which
only runs under Node.js. NodeParser launches a tiny ES-module bridge per
call: the bridge reads the script on stdin, classifies it (function, api,
table, ...) and parses it, then prints JSON:

    {"scheme": "function", "errors": [{"message": ..., "name": ...,
                                       "startOffset": 12, "endOffset": 17}]}

Offsets in the parser's output are loose (missing, null or NaN for
end-of-input tokens), so they are captured as optional here and defaulted
once, when validation turns them into positions.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from xanodev.config import ParserConfig
from xanodev.errors import ParserUnavailable

logger = logging.getLogger("xanodev.parser")

PACKAGE = "@xano/xanoscript-language-server"

_BRIDGE = """
import { xanoscriptParser } from "@xano/xanoscript-language-server/parser/parser.js";
import { getSchemeFromContent } from "@xano/xanoscript-language-server/utils.js";

const chunks = [];
for await (const chunk of process.stdin) chunks.push(chunk);
const text = Buffer.concat(chunks).toString("utf8");
const scheme = process.env.XANODEV_SCHEME || getSchemeFromContent(text);
let errors = [];
if (!process.env.XANODEV_CLASSIFY_ONLY) {
  errors = xanoscriptParser(text, scheme).errors.map((e) => ({
    message: e.message,
    name: e.name ?? null,
    startOffset: e.token?.startOffset ?? null,
    endOffset: e.token?.endOffset ?? null,
  }));
}
process.stdout.write(JSON.stringify({ scheme, errors }));
"""


@dataclass(frozen=True)
class RawParserError:
    """One error as reported by the parser, before position translation."""

    message: str
    name: Optional[str] = None
    start_offset: Optional[int] = None
    end_offset: Optional[int] = None

    @classmethod
    def from_mapping(cls, raw: dict) -> "RawParserError":
        """Build from the parser's JSON (camelCase or snake_case, flat or token-nested)."""
        token = raw.get("token") if isinstance(raw.get("token"), dict) else {}

        def offset(camel: str, snake: str) -> Optional[int]:
            for value in (raw.get(camel), raw.get(snake), token.get(camel)):
                # bool is an int subclass; NaN arrives as null or float
                if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                    return value
            return None

        message = raw.get("message")
        return cls(
            message=str(message) if message else "Unknown parser error",
            name=str(raw["name"]) if raw.get("name") else None,
            start_offset=offset("startOffset", "start_offset"),
            end_offset=offset("endOffset", "end_offset"),
        )


class XanoscriptParser(Protocol):
    """What validation needs from a parser."""

    def classify_scheme(self, text: str) -> str: ...

    def parse(self, text: str, scheme: str) -> list[RawParserError]: ...


class NodeParser:
    """Runs the language server's parser through ``node``."""

    def __init__(self, config: ParserConfig | None = None):
        self.config = config or ParserConfig()

    def _cwd(self) -> Optional[Path]:
        # ES module imports ignore NODE_PATH; resolution starts from cwd,
        # so run next to the configured node_modules directory.
        if not self.config.node_path:
            return None
        node_modules = Path(self.config.node_path).expanduser()
        return node_modules.parent if node_modules.name == "node_modules" else node_modules

    def _run(self, text: str, scheme: str = "", classify_only: bool = False) -> dict:
        env = dict(os.environ)
        env.pop("XANODEV_SCHEME", None)
        env.pop("XANODEV_CLASSIFY_ONLY", None)
        if scheme:
            env["XANODEV_SCHEME"] = scheme
        if classify_only:
            env["XANODEV_CLASSIFY_ONLY"] = "1"
        if self.config.node_path:
            env["NODE_PATH"] = str(Path(self.config.node_path).expanduser())

        cmd = [self.config.command, "--input-type=module", "-e", _BRIDGE]
        try:
            result = subprocess.run(
                cmd,
                input=text,
                cwd=self._cwd(),
                env=env,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.config.timeout,
            )
        except FileNotFoundError as exc:
            raise ParserUnavailable(f"'{self.config.command}' not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise ParserUnavailable(f"parser timed out after {self.config.timeout:g}s") from exc

        if result.returncode != 0:
            stderr = result.stderr.strip().splitlines()
            detail = stderr[-1] if stderr else f"exit code {result.returncode}"
            logger.warning("Parser bridge failed (%d): %s", result.returncode, result.stderr)
            raise ParserUnavailable(detail)

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ParserUnavailable(f"unreadable parser output: {exc}") from exc
        if not isinstance(data, dict):
            raise ParserUnavailable("unreadable parser output: expected a JSON object")
        return data

    def classify_scheme(self, text: str) -> str:
        return str(self._run(text, classify_only=True).get("scheme") or "")

    def parse(self, text: str, scheme: str) -> list[RawParserError]:
        errors = self._run(text, scheme=scheme).get("errors") or []
        return [RawParserError.from_mapping(e) for e in errors if isinstance(e, dict)]
