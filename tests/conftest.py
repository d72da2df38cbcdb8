import sys
from pathlib import Path

import pytest

# Ensure `src` (package) and `tests` (sample record modules) are importable when
# the project is not installed editable.
ROOT = Path(__file__).resolve().parent.parent
for path in (ROOT / "src", ROOT / "tests"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from mapsmith.config import get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    # Settings are cached process-wide; isolate each test from env leakage.
    for key in ("MAPSMITH_DEFAULT_TAG", "MAPSMITH_STRICT", "MAPSMITH_MAX_INLINE_DEPTH", "MAPSMITH_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
