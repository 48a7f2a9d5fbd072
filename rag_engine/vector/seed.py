"""
Seed data loading for the document store.

Seed files are JSON arrays of objects:
    {"id": 1, "text": "...", "index": 0, "embed": [0.01, ...]}
where text, index and embed are optional.
"""

import json
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ValidationError

from .types import DocumentRecord, as_vector
from ..core.errors import DataIntegrityError, InitializationError
from ..util.logging import logger


class SeedRecord(BaseModel):
    id: int
    text: Optional[str] = None
    index: Optional[int] = None
    embed: Optional[List[float]] = None


def parse_seed_records(items: list, dimension: Optional[int] = None, pipeline=None) -> List[DocumentRecord]:
    """
    Validate raw seed items and convert them into DocumentRecords.

    Args:
        items: Decoded JSON array
        dimension: Required embedding length; mismatches are fatal
        pipeline: Optional EmbeddingPipeline used to embed items that carry text but no vector

    Returns:
        Records in file order
    """
    if not isinstance(items, list):
        raise InitializationError("Seed data must be a JSON array of records")

    records = []
    missing_vectors = 0
    for position, item in enumerate(items):
        try:
            seed = SeedRecord.model_validate(item)
        except ValidationError as e:
            raise InitializationError(f"Invalid seed record at position {position}: {e}") from e

        embedding = as_vector(seed.embed) if seed.embed is not None else None
        if embedding is None and pipeline is not None and seed.text:
            embedding = pipeline.encode(seed.text)
        if embedding is None:
            missing_vectors += 1

        if embedding is not None and dimension is not None and len(embedding) != dimension:
            raise DataIntegrityError(
                f"Seed record {seed.id} has embedding dimension {len(embedding)}, expected {dimension}",
                expected=dimension,
                actual=len(embedding),
            )

        records.append(DocumentRecord(id=seed.id, text=seed.text, embedding=embedding, index=seed.index))

    if missing_vectors:
        logger.warning(f"{missing_vectors} seed records have no embedding and will not be searchable")

    return records


def load_seed_file(path: Union[str, Path], dimension: Optional[int] = None, pipeline=None) -> List[DocumentRecord]:
    """Read and validate a seed JSON file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            items = json.load(f)
    except FileNotFoundError as e:
        raise InitializationError(f"Seed data file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise InitializationError(f"Seed data file is not valid JSON: {path}: {e}") from e

    records = parse_seed_records(items, dimension=dimension, pipeline=pipeline)
    logger.log_vector_operation("seed_load", len(records), {"path": str(path)})
    return records
