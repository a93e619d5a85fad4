"""Run one absent / missed clock-out sweep outside the web process.

    python scripts/run_sweep.py                 # yesterday and today
    python scripts/run_sweep.py --date 2025-01-06
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from secureattend.common.datetime_utils import parse_iso_date
from secureattend.container import build_container


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--date", help="work date to sweep (YYYY-MM-DD); default sweeps yesterday and today")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=settings.DB_CONFIG,
        attendance_settings=getattr(settings, "ATTENDANCE", {}),
    )
    if args.date:
        results = [container.absence_sweep.run(parse_iso_date(args.date))]
    else:
        results = container.absence_sweep.run_due()

    print(json.dumps([r.to_dict() for r in results], indent=2))
    return 1 if any(r.errors for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
