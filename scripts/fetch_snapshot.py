from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

import argparse
import json

from gbfspulse.api.schemas import ErrorOut, SnapshotOut
from gbfspulse.api.service import SnapshotService
from gbfspulse.config.loader import load_config
from gbfspulse.utils.logging import configure_logging


# Keep all side effects (config IO, network calls) inside `main()` so the module is import-safe.
def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch one GBFS station snapshot with pain scores and print it as JSON.")
    parser.add_argument("--config", default=None, help="Config JSON path.")
    parser.add_argument("--system", default=None, help="System key (divvy, citibike, bluebikes, ...).")
    parser.add_argument("--top", type=int, default=None, help="Only print the N stations with the highest pain.")
    parser.add_argument("--log-level", default=None, help="Override logging.level from the config (name or number).")
    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.logging, level=args.log_level)

    service = SnapshotService(config)
    try:
        outcome = service.fetch_snapshot(args.system, top=args.top)
    finally:
        service.close()

    if outcome.ok and outcome.snapshot is not None:
        payload = SnapshotOut.from_snapshot(outcome.snapshot).model_dump(mode="json", by_alias=True)
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    error = ErrorOut(error=outcome.error or "Unknown error", details=outcome.details)
    print(json.dumps(error.model_dump(exclude_none=True), ensure_ascii=False), file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
