"""Shared fixtures for cvrender tests."""

import sys

import pytest
from typer.testing import CliRunner

from tests.helpers import FAKE_ENGINE


@pytest.fixture
def fake_engine(tmp_path) -> list:
    """Argv prefix running the stand-in LaTeX engine."""
    script = tmp_path / "fake_engine.py"
    script.write_text(FAKE_ENGINE)
    return [sys.executable, str(script)]


@pytest.fixture
def cli_runner():
    """Provide a reusable CLI test runner."""
    return CliRunner()


@pytest.fixture
def sample_resume() -> dict:
    """JSON Resume document with characters LaTeX treats specially."""
    return {
        "basics": {
            "name": "Ada Lovelace",
            "label": "R&D Engineer",
            "email": "ada@example.com",
            "url": "https://example.com/~ada",
            "summary": "Improved throughput by 50% with {novel} methods",
            "location": {"city": "London", "countryCode": "GB"},
            "profiles": [
                {"network": "GitHub", "username": "ada_l", "url": "https://github.com/ada_l"}
            ],
        },
        "work": [
            {
                "name": "Analytical Engines Ltd",
                "position": "Lead Programmer",
                "startDate": "1842-01",
                "endDate": None,
                "summary": "Wrote the first program",
                "highlights": ["Cut costs by $1M", "Designed C# & F# tooling"],
            }
        ],
        "education": [{"institution": "Home", "area": "Mathematics", "startDate": "1830"}],
        "skills": [{"name": "Math", "keywords": ["Calculus", "Bernoulli_numbers"]}],
    }
