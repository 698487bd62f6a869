from __future__ import annotations

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

_ROOT = Path(__file__).resolve().parent.parent


def test_long_description_is_the_project_readme() -> None:
    project = tomllib.loads((_ROOT / "pyproject.toml").read_text())["project"]

    assert project["readme"] == "README.md"
    assert (_ROOT / project["readme"]).read_text().startswith("# cane-metrics")
