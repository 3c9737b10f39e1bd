"""Shared fixtures: a small guide folder, templates and a fake Pandoc."""

import shlex
import sys
from pathlib import Path

import pytest

from scstg.config import BuildConfig


FAKE_PANDOC = '''\
import os
import sys

args = sys.argv[1:]
with open("pandoc_calls.log", "a", encoding="utf-8") as log:
    log.write(" ".join(args) + "\\n")

if os.environ.get("FAKE_PANDOC_FAIL") and any(os.environ["FAKE_PANDOC_FAIL"] in a for a in args):
    sys.stderr.write("pandoc: boom\\n")
    sys.exit(3)

output = None
for i, arg in enumerate(args):
    if arg in ("--output", "-o"):
        output = args[i + 1]

inputs = [a for a in args if a.endswith(".md")]
with open(output, "w", encoding="utf-8") as out:
    out.write("FAKE " + output + "\\n")
    for path in inputs:
        with open(path, encoding="utf-8") as f:
            out.write(f.read())
'''

METADATA = """---
title: OWASP Smart Contract Security Testing Guide
author:
  - Shashank
  - Pratik Lagaskar
lang: en
---
"""

CHAPTER_ONE = """# Introduction

Welcome to the guide.

<!-- \\pagebreak -->

## Scope
"""

CHAPTER_TWO = """# Reentrancy

<img src="images/reentrancy.png" width="80%" />

```solidity
function withdraw() external {
    (bool ok, ) = msg.sender.call{value: balances[msg.sender]}("");
}
```
"""


@pytest.fixture
def workdir(tmp_path) -> Path:
    """A working directory holding a guide folder and the LaTeX templates."""
    document = tmp_path / "Document"
    (document / "images").mkdir(parents=True)
    (document / "metadata.md").write_text(METADATA, encoding="utf-8")
    (document / "0x01-Introduction.md").write_text(CHAPTER_ONE, encoding="utf-8")
    (document / "0x02-Reentrancy.md").write_text(CHAPTER_TWO, encoding="utf-8")
    (document / "images" / "reentrancy.png").write_bytes(b"\x89PNG")

    templates = tmp_path / "src" / "pandocker"
    templates.mkdir(parents=True)
    for name in ("latex-header.tex", "cover.tex", "first_page.tex"):
        (templates / name).write_text(f"% {name}\n$title$\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def fake_pandoc(tmp_path_factory) -> str:
    """Command line of a Pandoc stand-in that records its calls."""
    script = tmp_path_factory.mktemp("bin") / "fake_pandoc.py"
    script.write_text(FAKE_PANDOC, encoding="utf-8")
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


@pytest.fixture
def config(fake_pandoc) -> BuildConfig:
    """Build configuration using the fake Pandoc."""
    return BuildConfig(pandoc=fake_pandoc)
