"""Test configuration for database unit tests.

The in-memory SQLite ``session`` fixture comes from ``test/unit_test/conftest.py``;
this module adds sample rows shared by entity and repository tests.
"""

from __future__ import annotations

import pytest


@pytest.fixture(scope="function")
def sample_generation_data() -> dict:
    """Sample character generation data for testing."""
    return {
        "original_prompt": "a knight with a silver sword",
        "enhanced_prompt": "fantasy art style, magical character, a knight with a silver sword",
        "style": "fantasy",
        "pose": "standing",
        "gender": "male",
        "age": "adult",
        "aspect_ratio": "3:4",
        "quality": "hd",
        "num_images": 1,
        "credits_used": 25,
        "generated_images": [{"url": "https://mock.cdn/knight.png", "width": 768, "height": 1024}],
    }


@pytest.fixture(scope="function")
def sample_gallery_item_data() -> dict:
    """Sample gallery item data for testing."""
    return {
        "generation_id": 1,
        "title": "Fantasy Character",
        "description": "A knight",
        "tags": ["fantasy", "standing", "male", "adult"],
        "image_url": "https://mock.cdn/knight.png",
        "style": "fantasy",
        "pose": "standing",
        "enhanced_prompt": "fantasy art style, a knight",
    }

