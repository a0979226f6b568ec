"""Seed helper that loads sample documents into MongoDB."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from unirecords.config import ConfigError
from unirecords.db import connect_from_config, ensure_indexes
from unirecords.entities import RESOURCES
from unirecords.errors import RecordsError
from unirecords.logging import setup_logging
from unirecords.store import RecordStore
from unirecords.validation import require_valid

SEED_PATH = Path(__file__).resolve().parent / "seed.json"


def read_seed_file(path: Path = SEED_PATH) -> Dict[str, List[Dict[str, Any]]]:
    with path.open("r", encoding="utf-8") as seed_file:
        data = json.load(seed_file)
    if not isinstance(data, dict):
        raise ValueError("Seed file must contain an object of collections")
    unknown = sorted(set(data) - set(RESOURCES))
    if unknown:
        raise ValueError(f"Unknown collections in seed file: {', '.join(unknown)}")
    return data


def load(store: RecordStore, seed_data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, int]:
    """Replace each seeded collection with validated copies of its documents."""

    loaded: Dict[str, int] = {}
    for kind, documents in seed_data.items():
        if not isinstance(documents, list):
            raise ValueError(f"Seed data for collection '{kind}' must be a list")

        spec = RESOURCES[kind]
        repository = store.repository(kind)
        repository.collection.delete_many({})
        for document in documents:
            repository.create(require_valid(spec, document, require_all=True))
        loaded[kind] = len(documents)
    return loaded


def main() -> None:
    setup_logging()
    try:
        database = connect_from_config()
        ensure_indexes(database)
    except (ConfigError, RecordsError) as exc:
        print(f"Configuration error: {exc}")
        raise SystemExit(1)

    try:
        loaded = load(RecordStore(database), read_seed_file())
    except RecordsError as exc:
        print(f"Seeding failed: {exc.message} {exc.details or ''}".rstrip())
        raise SystemExit(1)
    finally:
        database.client.close()

    for kind, count in loaded.items():
        print(f"Loaded {count} document(s) into '{kind}' collection")
    print(f"Seeding complete for database '{database.name}'.")


if __name__ == "__main__":
    main()
