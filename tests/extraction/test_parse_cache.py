"""Tests for ParseCache."""

import threading

import pytest

from forest.extraction.cache import ParseCache
from forest.parsing.tree_sitter_wrapper import RustParser, has_mut, is_tree_sitter_available

from tests.conftest import first_node_of_type


class TestParseCache:
    def test_miss_then_hit(self):
        cache = ParseCache()
        sentinel = object()
        assert cache.get("fn a() {}", "a.rs") is None
        cache.put("fn a() {}", "a.rs", sentinel)
        assert cache.get("fn a() {}", "a.rs") is sentinel
        assert cache.stats["hits"] == 1
        assert cache.stats["misses"] == 1
        assert cache.stats["hit_rate"] == 50.0

    def test_key_includes_content(self):
        cache = ParseCache()
        cache.put("fn a() {}", "a.rs", object())
        assert cache.get("fn b() {}", "a.rs") is None

    def test_key_includes_path(self):
        cache = ParseCache()
        cache.put("fn a() {}", "a.rs", object())
        assert cache.get("fn a() {}", "b.rs") is None

    def test_lru_eviction(self):
        cache = ParseCache(max_entries=2)
        cache.put("1", "one.rs", object())
        cache.put("2", "two.rs", object())
        cache.put("3", "three.rs", object())
        assert len(cache) == 2
        assert cache.get("1", "one.rs") is None

    def test_ttl_expiry(self):
        cache = ParseCache(ttl_seconds=0)
        cache.put("x", "x.rs", object())
        assert cache.get("x", "x.rs") is None
        assert len(cache) == 0

    def test_clear(self):
        cache = ParseCache()
        cache.put("x", "x.rs", object())
        cache.get("x", "x.rs")
        cache.clear()
        assert len(cache) == 0
        assert cache.stats["hits"] == 0

    def test_concurrent_puts(self):
        cache = ParseCache(max_entries=1000)

        def fill(offset):
            for i in range(100):
                cache.put(str(offset + i), f"{offset + i}.rs", object())

        threads = [threading.Thread(target=fill, args=(n * 100,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert len(cache) == 800


@pytest.mark.skipif(not is_tree_sitter_available(), reason="tree-sitter Rust grammar not installed")
class TestGetOrParse:
    def test_parses_once(self):
        cache = ParseCache()
        first = cache.get_or_parse("fn main() {}\n", "main.rs")
        second = cache.get_or_parse("fn main() {}\n", "main.rs")
        assert first is second
        assert not first.has_errors
        assert first.lines == ["fn main() {}", ""]

    def test_error_tree_is_cached_not_raised(self):
        parsed = ParseCache().get_or_parse("fn main( {", "bad.rs")
        assert parsed.has_errors

    def test_parser_returns_error_tree(self):
        parsed = RustParser().parse("fn main( {", "bad.rs")
        assert parsed.has_errors
        assert parsed.file_path == "bad.rs"

    def test_has_mut_reads_direct_children(self):
        parsed = RustParser().parse("fn f(x: &mut u8) { let mut y = 1; }", "m.rs")
        let = first_node_of_type(parsed.root, "let_declaration")
        parameter = first_node_of_type(parsed.root, "parameter")
        assert has_mut(let)
        assert not has_mut(parameter)
        assert has_mut(parameter.child_by_field_name("type"))
