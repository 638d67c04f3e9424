from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

import argparse
import os

# `uvicorn` serves the FastAPI app as an ASGI server during local development.
import uvicorn

from gbfspulse.api.app import create_app
from gbfspulse.config.loader import load_config


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the GBFS snapshot API.")
    parser.add_argument("--config", default=None, help="Config JSON path.")
    parser.add_argument("--host", default=os.getenv("GBFSPULSE_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("GBFSPULSE_PORT", "8000")))
    args = parser.parse_args()

    config = load_config(args.config)
    app = create_app(config)

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        timeout_keep_alive=int(os.getenv("GBFSPULSE_TIMEOUT_KEEP_ALIVE", "75")),
    )


if __name__ == "__main__":
    main()
