"""Pytest configuration for postkb tests."""

import sys
from pathlib import Path

import pytest

# Add repository root to path for imports
repo_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(repo_root))


PYTHON_PERF = """---
layout: post
title: "Python Perf"
date: 2024-01-25
categories: python
---
Profiling first, then tuning.
"""

CADDY = """---
layout: post
title: Caddy
date: 2024-08-08 09:30:00 +0800
categories: deployment caddy
---
A Caddyfile for a reverse proxy.
"""


@pytest.fixture
def post_texts():
    """The two-post scenario: a (python) and b (deployment, caddy)."""
    return [("a", PYTHON_PERF), ("b", CADDY)]


@pytest.fixture
def posts_dir(tmp_path):
    """A content root with two valid posts."""
    root = tmp_path / "_posts"
    root.mkdir()
    (root / "2024-01-25-python-perf.md").write_text(PYTHON_PERF, encoding="utf-8")
    (root / "2024-08-08-caddy.md").write_text(CADDY, encoding="utf-8")
    return root
