"""Memory Lane — dev launcher. Starts the backend API with uvicorn."""

import argparse
import logging
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def main():
    parser = argparse.ArgumentParser(description="Memory Lane dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Save/settings directory (default: ./data)")
    parser.add_argument("--content-dir", type=Path, default=None,
                        help="Scene JSON directory (default: ./content/scenes)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for scene selection (reproducible runs)")
    parser.add_argument("--new-game", action="store_true",
                        help="Delete the existing save before starting")
    parser.add_argument("--no-reload", action="store_true",
                        help="Disable auto-reload on source changes")
    args = parser.parse_args()

    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # The app reads these when uvicorn imports backend.app
    if args.data_dir:
        os.environ["DATA_DIR"] = str(args.data_dir.resolve())
    if args.content_dir:
        os.environ["CONTENT_DIR"] = str(args.content_dir.resolve())
    if args.seed is not None:
        os.environ["RANDOM_SEED"] = str(args.seed)

    if args.new_game:
        from memory_lane.storage import SaveStore
        data_dir = args.data_dir or ROOT / "data"
        if SaveStore(data_dir).delete():
            print(f"Removed save in {data_dir}")

    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    uvicorn.run(
        "backend.app:app",
        host=HOST,
        port=int(BACKEND_PORT),
        reload=not args.no_reload,
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
