"""Run the RankSocial API with Uvicorn."""
from __future__ import annotations

import logging
import os

import uvicorn


def main() -> None:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    host = os.getenv("RANKSOCIAL_HOST", "0.0.0.0")
    port = int(os.getenv("RANKSOCIAL_PORT", "8000"))
    reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"
    uvicorn.run("ranksocial.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
