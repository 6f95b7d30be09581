"""Shared manifest fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest

PLANNER = """\
name: trip-planner
description: Plans a day-by-day trip itinerary for a region.
signature: "region, days:number -> itinerary"
agents: [researcher]
model:
  model: openai/gpt-4o
  api_key: sk-secret
"""

RESEARCHER = """\
name: researcher
description: Looks up facts about a region and summarises them.
signature: "region, topic -> summary"
exclude_fields_from_passthrough: [topic]
"""


@pytest.fixture
def agents_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "agents"
    directory.mkdir()
    (directory / "planner.yaml").write_text(PLANNER)
    (directory / "researcher.yaml").write_text(RESEARCHER)
    return directory
