"""Shared fixtures for the Form Layout Toolkit test-suite.

Tree builders live in ``layout_factory`` (importable because ``tests`` is on
the pytest python path); the fixtures here assemble the trees most tests
start from.
"""

import logging

import pytest

from form_layout_toolkit.config import ConfigManager
from form_layout_toolkit.core.identity import IdGenerator
from layout_factory import field, form, section, subform, tab

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user overrides at an empty directory and reset the config singleton."""
    monkeypatch.setenv("FORM_LAYOUT_CONFIG_DIR", str(tmp_path / "user_config"))
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def id_generator():
    """Deterministic generator: ids look like ``t-1``, ``t-2``…"""
    return IdGenerator(prefix="t")


@pytest.fixture
def sample_form():
    """
    form
    ├── tab t1
    │   ├── row0: [section s1]
    │   │         ├── row0: [f1, f2]
    │   │         ├── row1: [f3]
    │   │         └── row2: [subform sf1 → row0: [f4]]
    │   └── row1: [section s2]
    │             └── row0: [section s3 → row0: [f5]]
    └── tab t2
        └── row0: [section s4 (no rows)]
    """
    s1 = section(
        "s1",
        [field("f1"), field("f2")],
        [field("f3")],
        [subform("sf1", [field("f4")])],
    )
    s2 = section("s2", [section("s3", [field("f5")])])
    return form(
        tab("t1", [s1], [s2]),
        tab("t2", [section("s4")]),
    )


@pytest.fixture
def three_row_form():
    """A single section holding three singleton rows ``[a], [b], [c]``."""
    return form(tab("t1", [section("s1", [field("a")], [field("b")], [field("c")])]))
