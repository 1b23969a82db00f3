"""
Pytest configuration and shared fixtures for Forest tests.
"""

from pathlib import Path

import pytest

from forest.utils.logger import logger

# ============================================================================
# Rust samples
# ============================================================================

# Parses cleanly. Line numbers are asserted by tests; keep the layout stable.
SIMPLE_RUST = """struct Point {
    x: i32,
    y: i32,
}

enum Shape {
    Circle(f64),
    Square(f64),
}

fn compute(mut n: u32, label: &str) -> u32 {
    let mut total = 5;
    let name = "hi";
    let (a, b): (i32, String) = (1, String::new());
    for mut item in vec![1, 2, 3] {
        item += 1;
        total += item;
    }
    n += total;
    n
}
"""

# Contains a syntax error on line 9, so the tree path refuses it.
BROKEN_RUST = """fn broken(mut count: i32) {
    let mut total = 0;
    let label = "x";
    let (first, second) = (1, 2);
    for mut step in 0..10 {
        total += step
    }
    if let Some(mut value) = maybe {
    let oops = ;
}
"""

PATTERNS_RUST = """struct Point {
    x: i32,
    y: i32,
}

fn patterns(p: Point, maybe: Option<u8>, arr: [u8; 3], r: &i32) {
    let Point { x, y: mut py } = p;
    let Some(inner) = maybe else { return; };
    let [first, rest @ ..] = arr;
    let &val = r;
    for (i, elem) in arr.iter().enumerate() {
        let _ = (i, elem);
    }
    if let Some(mut found) = maybe {
        found += 1;
    }
    let mut queue = vec![1u8];
    while let Some(mut top) = queue.pop() {
        top += 1;
    }
}
"""

SCOPES_RUST = """fn outer() {
    fn inner() {
        let a = 1;
    }
    let b = 2;
}

struct Counter;

impl Counter {
    fn bump(&mut self, mut step: i64) {
        let z = step;
    }
}

trait Speak {
    fn speak(&self);
}
"""

CARGO_TOML = """[package]
name = "demo"
version = "1.2.3"
edition = "2021"
"""


@pytest.fixture
def simple_rust():
    return SIMPLE_RUST


@pytest.fixture
def broken_rust():
    return BROKEN_RUST


@pytest.fixture
def rust_project(tmp_path: Path) -> Path:
    """A small crate with one clean file, one broken file and a target dir."""
    root = tmp_path / "demo"
    (root / "src" / "nested").mkdir(parents=True)
    (root / "target" / "debug").mkdir(parents=True)
    (root / ".hidden").mkdir()

    (root / "Cargo.toml").write_text(CARGO_TOML)
    (root / "src" / "main.rs").write_text(SIMPLE_RUST)
    (root / "src" / "nested" / "broken.rs").write_text(BROKEN_RUST)
    (root / "src" / "notes.txt").write_text("not rust")
    (root / "target" / "debug" / "build.rs").write_text("fn generated() {}\n")
    (root / ".hidden" / "secret.rs").write_text("fn secret() {}\n")
    return root


@pytest.fixture(autouse=True)
def _drop_log_sinks():
    """Sinks added during a test may point at streams that are closed afterwards."""
    yield
    logger.remove()


def first_node_of_type(root, node_type):
    """First node of ``node_type`` in source order under ``root``."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == node_type:
            return node
        stack.extend(reversed(node.named_children))
    raise AssertionError(f"no {node_type} node")
