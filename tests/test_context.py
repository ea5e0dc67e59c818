"""Tests for xanodev.context — docs root resolution, caching, version stamp."""

import json
import threading

import pytest

from xanodev import paths
from xanodev.context import UNKNOWN_VERSION, DocsContext
from xanodev.errors import DocFileMissing, DocsNotFound


class TestDocsRoot:
    def test_first_candidate_with_version(self, tmp_path, docs_root):
        empty = tmp_path / "empty"
        empty.mkdir()
        ctx = DocsContext(candidates=[empty, docs_root])
        assert ctx.docs_root == docs_root

    def test_falls_back_to_first_existing_candidate(self, tmp_path):
        a, b, c = tmp_path / "a", tmp_path / "b", tmp_path / "c"
        b.mkdir()
        c.mkdir()
        ctx = DocsContext(candidates=[a, b, c])
        assert ctx.docs_root == b

    def test_no_candidates(self):
        with pytest.raises(DocsNotFound, match="XANODEV_DOCS_PATH"):
            _ = DocsContext(candidates=[]).docs_root

    def test_no_candidate_exists(self, tmp_path):
        a, b = tmp_path / "a", tmp_path / "b"
        with pytest.raises(DocsNotFound) as exc_info:
            _ = DocsContext(candidates=[a, b]).docs_root
        assert exc_info.value.candidates == [str(a), str(b)]

    def test_topic_lookup_reports_missing_docs(self, tmp_path):
        from xanodev.xanoscript import xanoscript_docs

        ctx = DocsContext(candidates=[tmp_path / "gone"])
        with pytest.raises(DocsNotFound, match="Tried: "):
            xanoscript_docs(ctx, topic="syntax")

    def test_override_comes_first(self, docs_root):
        ctx = DocsContext(override=str(docs_root))
        assert ctx.docs_root == docs_root

    def test_shipped_docs_by_default(self):
        ctx = DocsContext()
        assert ctx.docs_root == paths.PACKAGE_DIR / paths.DOCS_DIRNAME

    def test_resolved_once_across_threads(self, docs_root):
        ctx = DocsContext(candidates=[docs_root])
        seen = []
        threads = [threading.Thread(target=lambda: seen.append(ctx.docs_root)) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len({id(p) for p in seen}) == 1


class TestRead:
    def test_reads_and_caches(self, ctx, docs_root):
        first = ctx.read("apis.md")
        (docs_root / "apis.md").write_text("changed", encoding="utf-8")
        assert ctx.read("apis.md") == first

    def test_missing_file(self, ctx):
        with pytest.raises(DocFileMissing) as exc_info:
            ctx.read("nope.md", "nope")
        assert exc_info.value.topic == "nope"
        assert exc_info.value.path == "nope.md"

    def test_missing_not_cached(self, ctx, docs_root):
        with pytest.raises(DocFileMissing):
            ctx.read("late.md")
        (docs_root / "late.md").write_text("now here", encoding="utf-8")
        assert ctx.read("late.md") == "now here"

    def test_size(self, ctx, docs_root):
        assert ctx.size("apis.md") == (docs_root / "apis.md").stat().st_size
        assert ctx.size("nope.md") == 0


class TestVersion:
    def test_reads_version(self, ctx):
        assert ctx.version == "9.9.9"

    def test_missing_version_file(self, tmp_path):
        assert DocsContext(candidates=[tmp_path]).version == UNKNOWN_VERSION

    def test_malformed_version_file(self, tmp_path):
        (tmp_path / "version.json").write_text("{not json", encoding="utf-8")
        assert DocsContext(candidates=[tmp_path]).version == UNKNOWN_VERSION

    def test_no_version_key(self, tmp_path):
        (tmp_path / "version.json").write_text(json.dumps({"updated": "x"}), encoding="utf-8")
        assert DocsContext(candidates=[tmp_path]).version == UNKNOWN_VERSION

    def test_cached(self, ctx, docs_root):
        assert ctx.version == "9.9.9"
        (docs_root / "version.json").write_text(json.dumps({"version": "1.0"}), encoding="utf-8")
        assert ctx.version == "9.9.9"
