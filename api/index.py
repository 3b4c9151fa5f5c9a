"""Vercel entrypoint serving the badge registration API."""

import sys
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if SRC.is_dir() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from badge_registration.api.app import create_app  # noqa: E402
from badge_registration.containers import build_container  # noqa: E402

app = create_app(build_container())
