from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from habit_hero.config import load_settings
from habit_hero.jobs_runner import run_job
from habit_hero.logging_setup import setup_logging
from habit_hero.main import build_session


def main() -> None:
    if len(sys.argv) != 2:
        raise SystemExit("Usage: python jobs.py <reminders|reset_day>")

    setup_logging()
    settings = load_settings()
    run_job(sys.argv[1], build_session(settings))


if __name__ == "__main__":
    main()
