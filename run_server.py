#!/usr/bin/env python3
"""Development server runner for starforge."""

import argparse
import os

import uvicorn

from starforge.server.session import RULEPACK_ENV

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the starforge HTTP API")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=9000, help="Port (default: 9000)")
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("--rulepack", metavar="FILE", help="Rulepack JSON (default: bundled starter pack)")
    args = parser.parse_args()

    if args.rulepack:
        os.environ[RULEPACK_ENV] = os.path.abspath(args.rulepack)

    uvicorn.run(
        "starforge.server.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
