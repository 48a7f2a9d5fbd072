#!/usr/bin/env python3
"""
Start the engine HTTP API with uvicorn.
"""

import argparse
import sys
from pathlib import Path

# Add the project root to sys.path to import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from rag_engine.core.config import debug_enabled


def main():
    parser = argparse.ArgumentParser(description="Run the RAG engine API")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to serve on (default: 8000)")
    args = parser.parse_args()

    uvicorn.run(
        "rag_engine.api.main:app",
        host=args.host,
        port=args.port,
        log_level="debug" if debug_enabled() else "info",
    )


if __name__ == "__main__":
    main()
