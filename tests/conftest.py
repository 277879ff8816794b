import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from structured_i18n.locales import LocaleRegistry  # noqa: E402


@pytest.fixture(scope="session")
def registry() -> LocaleRegistry:
    return LocaleRegistry.from_config({
        "source_locale": "en",
        "locales": {
            "en": {"plural_categories": ["one", "other"]},
            "es": {"plural_categories": ["one", "other"]},
            "cs": {"plural_categories": ["one", "few", "many", "other"]},
            "ja": {"plural_categories": ["other"], "warn_variable_separator": False},
        },
    })


@pytest.fixture
def en(registry):
    return registry["en"]


@pytest.fixture
def es(registry):
    return registry["es"]


@pytest.fixture
def ja(registry):
    return registry["ja"]
