from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

import pytest

CALC_SOURCE = """
// Package calc provides arithmetic helpers. It is tiny.
package calc

import "fmt"

// Pi is an approximation.
const Pi = 3.14

// Add sums two integers. See also Sub.
func Add(a, b int) int {
	return a + b
}

// sub subtracts.
func sub(a, b int) int {
	return a - b
}

// Counter counts things.
type Counter struct {
	n int
}

// Inc increments the counter.
func (c *Counter) Inc() {
	c.n++
}

func (c *Counter) reset() {
	c.n = 0
}

// String formats the counter.
func (c Counter) String() string {
	return fmt.Sprint(c.n)
}
"""


class GoSourceBuilder:
    """Writes Go source files into a throwaway directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "src"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> Path:
        """Write `name -> contents` entries and return the directory."""
        for name, content in files.items():
            path = self.root / name
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return self.root


@pytest.fixture
def go_source(tmp_path: Path) -> GoSourceBuilder:
    """Provide a Go source directory builder rooted at the pytest tmp_path."""
    return GoSourceBuilder(tmp_path)


@pytest.fixture
def calc_dir(go_source: GoSourceBuilder) -> Path:
    return go_source.write({"calc.go": CALC_SOURCE})
