"""Shared test fixtures for the driver scanner test suite."""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from driver_scan.rules.table import Rule, RuleTable

SAMPLE_CSV = "키워드,기사명\n해운대 우동,김철수\n센텀시티,이영희\n"


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic RGB test image."""
    image = np.full((120, 240, 3), 200, dtype=np.uint8)
    image[40:80, 40:200] = (20, 20, 20)
    return image


@pytest.fixture
def sample_png_bytes(sample_image: np.ndarray) -> bytes:
    """Encode the sample image as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(sample_image).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """Write a small rule table to disk."""
    path = tmp_path / "drivers.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def table() -> RuleTable:
    """Return a small rule table."""
    return RuleTable(
        (
            Rule(keyword="해운대 우동", assignee="김철수"),
            Rule(keyword="센텀시티", assignee="이영희"),
        )
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
