"""Run the inventory editor web application locally."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

import uvicorn

from inventory_editor.config import DEFAULT_DATABASE_URL


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--database-url",
        default=os.environ.get("INVENTORY_DATABASE_URL", DEFAULT_DATABASE_URL),
        help="SQLAlchemy URL of the product database.",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("INVENTORY_LOG_LEVEL", "INFO"),
        help="Minimum level written to stderr.",
    )
    parser.add_argument("--reload", action="store_true", help="Restart on code changes.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    # The app reads its configuration from the environment at startup.
    os.environ["INVENTORY_DATABASE_URL"] = args.database_url
    os.environ["INVENTORY_LOG_LEVEL"] = args.log_level
    print(f"Serving inventory editor on http://{args.host}:{args.port} ({args.database_url})")
    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
