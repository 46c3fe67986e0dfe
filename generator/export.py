"""
Export: flat wire-format records, as JSON.

Book records serialize to {id, title, isbn, publishedYear, genre,
description, state, creatorId, updaterId}. Key order is fixed so equal
batches always produce byte-identical output.
"""

import json
from pathlib import Path
from typing import Iterable

from generator.records import BookRecord, PersonRecord, Sample

BOOK_FIELDS = ("id", "title", "isbn", "publishedYear", "genre",
               "description", "state", "creatorId", "updaterId")
PERSON_FIELDS = ("id", "age", "income", "region")


def to_wire(samples: Iterable[Sample]) -> list[dict]:
    return [s.to_dict() for s in samples]


def dumps(samples: Iterable[Sample], indent: int | None = 2) -> str:
    return json.dumps(to_wire(samples), indent=indent, ensure_ascii=False)


def write_json(samples: Iterable[Sample], path: str | Path, indent: int | None = 2) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(samples, indent=indent) + "\n", encoding="utf-8")
    return path


def read_json(path: str | Path) -> list[Sample]:
    """Inverse of write_json. Record type is inferred from the keys."""
    with open(path, "r", encoding="utf-8") as fh:
        rows = json.load(fh)
    samples = []
    for row in rows:
        if set(row) == set(BOOK_FIELDS):
            samples.append(BookRecord.from_dict(row))
        elif set(row) == set(PERSON_FIELDS):
            samples.append(PersonRecord.from_dict(row))
        else:
            raise ValueError(f"Unrecognized record keys: {sorted(row)}")
    return samples
