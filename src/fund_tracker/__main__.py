"""Run the API server: ``python -m fund_tracker``."""

import os

import uvicorn

from fund_tracker.main import app


def main() -> None:
    """Start uvicorn with the port from FUND_TRACKER_PORT."""
    port = int(os.environ.get("FUND_TRACKER_PORT", "8001"))
    uvicorn.run(app, host="127.0.0.1", port=port)


if __name__ == "__main__":
    main()
