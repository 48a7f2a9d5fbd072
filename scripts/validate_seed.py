#!/usr/bin/env python3
"""
Seed Data Validation Utility
Loads a seed JSON file, checks embedding dimensionality against the configured
model and bulk-loads it into the configured vector store as a smoke test.
"""

import argparse
import sys
from pathlib import Path

# Add the project root to sys.path to import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from rag_engine.core.config import SEED_DATA_PATH, get_model_config, get_vector_store, validate_config
from rag_engine.core.errors import RagEngineError
from rag_engine.vector.seed import load_seed_file


def main(argv=None):
    """Validate a seed file. Returns the process exit code."""
    parser = argparse.ArgumentParser(description="Validate RAG seed data")
    parser.add_argument("path", nargs="?", default=SEED_DATA_PATH, help="Seed JSON file")
    parser.add_argument("--dimension", type=int, default=None,
                        help="Expected embedding dimension (defaults to the configured model)")
    args = parser.parse_args(argv)

    issues = validate_config()
    for issue in issues:
        print(f"WARNING: {issue}")

    dimension = args.dimension or get_model_config().dimension
    print(f"Validating {args.path} (expected dimension {dimension})...")

    try:
        records = load_seed_file(args.path, dimension=dimension)
    except RagEngineError as e:
        print(f"ERROR: {e}")
        return 1

    with_vectors = sum(1 for r in records if r.embedding is not None)
    print(f"✓ {len(records)} records, {with_vectors} with embeddings")

    store = get_vector_store()
    store.bulk_load(records)
    print(f"✓ Loaded into {type(store).__name__} ({store.count()} records)")

    if with_vectors:
        first = next(r for r in records if r.embedding is not None)
        neighbors = store.nearest_neighbors(first.embedding, k=1)
        print(f"✓ Verification search returned {len(neighbors)} result(s)")

    return 0


if __name__ == "__main__":
    sys.exit(main())
