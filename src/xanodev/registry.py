"""Topic registries — one engine shared by every documentation domain.

A registry is an ordered, immutable table of topics plus a keyword alias
map. Name resolution is: exact key > alias > partial (substring either way).
Path matching tests each topic's applicability globs against a workspace
path and always puts the foundational topic first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from xanodev.errors import ConfigError, TopicNotFound
from xanodev.globs import glob_match, normalize_path


@dataclass(frozen=True)
class TopicEntry:
    """One documentation topic."""

    identifier: str
    reference: str  # backing file name or structured document key
    patterns: tuple[str, ...] = ()
    description: str = ""


def _norm(name: str) -> str:
    return name.strip().lower()


class TopicRegistry:
    """Ordered topic table with alias and path resolution."""

    def __init__(
        self,
        domain: str,
        entries: Iterable[TopicEntry],
        aliases: Optional[dict[str, str]] = None,
        foundational: Optional[str] = None,
        index_topic: Optional[str] = None,
    ):
        self.domain = domain
        self._entries: tuple[TopicEntry, ...] = tuple(entries)
        self._by_key: dict[str, TopicEntry] = {}
        for entry in self._entries:
            key = _norm(entry.identifier)
            if key in self._by_key:
                raise ConfigError(f"duplicate {domain} topic '{entry.identifier}'")
            self._by_key[key] = entry

        self._aliases: dict[str, str] = {_norm(k): _norm(v) for k, v in (aliases or {}).items()}
        for alias in self._aliases:
            self._chain_end(alias)

        for name in (foundational, index_topic):
            if name is not None and _norm(name) not in self._by_key:
                raise ConfigError(f"{domain} registry references unknown topic '{name}'")
        self.foundational = foundational
        self.index_topic = index_topic

    # -- lookup ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TopicEntry]:
        return iter(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _norm(name) in self._by_key

    def names(self) -> list[str]:
        return [e.identifier for e in self._entries]

    def entries(self) -> list[TopicEntry]:
        return list(self._entries)

    def get(self, identifier: str) -> TopicEntry | None:
        return self._by_key.get(_norm(identifier))

    def aliases_for(self, identifier: str) -> list[str]:
        """Keywords that resolve (directly or through other aliases) to *identifier*."""
        target = _norm(identifier)
        found = []
        for alias in self._aliases:
            entry = self._lookup(self._chain_end(alias))
            if entry is not None and _norm(entry.identifier) == target:
                found.append(alias)
        return found

    def _chain_end(self, key: str) -> str:
        """Follow alias hops from *key* until a registered name or a non-alias.

        Hops are bounded by the alias table size; a cycle raises ConfigError.
        """
        for _ in range(len(self._aliases) + 1):
            if key in self._by_key:
                return key
            nxt = self._aliases.get(key)
            if nxt is None:
                return key
            key = nxt
        raise ConfigError(
            f"alias cycle in {self.domain} topics at '{key}'",
            "Every alias chain must end at a topic name.",
        )

    def _lookup(self, key: str) -> TopicEntry | None:
        """Exact identifier, else the first partial match (substring either way)."""
        if key in self._by_key:
            return self._by_key[key]
        for entry in self._entries:
            ident = _norm(entry.identifier)
            if key in ident or ident in key:
                return entry
        return None

    def resolve(self, name: str) -> TopicEntry:
        """Resolve a user-supplied topic name.

        Aliases are followed first; the last name in the chain may itself be
        a partial match. Raises TopicNotFound listing every valid identifier.
        """
        key = _norm(name)
        if not key:
            raise TopicNotFound(self.domain, name, self.names())

        entry = self._lookup(self._chain_end(key))
        if entry is None:
            raise TopicNotFound(self.domain, name, self.names())
        return entry

    # -- path matching -----------------------------------------------------

    def match_path(self, path: str) -> list[str]:
        """Topics whose applicability globs match *path*, foundational first."""
        target = normalize_path(path)
        matched: list[str] = []
        for entry in self._entries:
            if entry.identifier == self.index_topic:
                continue
            if any(glob_match(p, target) for p in entry.patterns):
                matched.append(entry.identifier)

        if self.foundational is not None and self.foundational not in matched:
            matched.insert(0, self.foundational)
        return matched
