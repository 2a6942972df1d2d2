"""Per-key tallies over tabular records.

Loads records from CSV or JSON-lines files and groups them by one field,
counting, summing or keeping the maximum of another field per key.
"""

from __future__ import annotations

import csv
import json
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from logging import getLogger
from pathlib import Path
from typing import Any, Literal, TextIO, cast

from pydantic import BaseModel, ConfigDict, model_validator
from typing_extensions import Self

from keyfold.grouping import DEFAULT_INTEGER_POLICY, IntegerPolicy, grouping_by

logger = getLogger(__name__)

Record = dict[str, Any]

#: Input file formats understood by load_records
RecordFormat = Literal["csv", "jsonl"]

#: Per-key measures a tally can compute
Measure = Literal["count", "sum", "max"]


class TallyOptions(BaseModel):
    """What to tally and how.

    Attributes:
        key: Record field whose value is the group key.
        measure: ``count`` elements, ``sum`` a field, or keep the ``max`` of a field.
        field: The field summed or maximised. Required unless counting.
        policy: Integer overflow convention for ``count`` and ``sum``.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    measure: Measure = "count"
    field: str | None = None
    policy: IntegerPolicy = DEFAULT_INTEGER_POLICY

    @model_validator(mode="after")
    def check_field_for_measure(self) -> Self:
        if self.measure != "count" and self.field is None:
            raise ValueError(f"measure {self.measure!r} needs a field")
        return self


def _infer_format(path: str | Path) -> RecordFormat:
    return "csv" if Path(path).suffix.lower() == ".csv" else "jsonl"


@contextmanager
def _open_text(path: str | Path) -> Iterator[TextIO]:
    if str(path) == "-":
        yield sys.stdin
        return
    with open(path, newline="", encoding="utf-8") as f:
        yield f


def _parse(lines: Iterable[str], fmt: RecordFormat) -> Iterator[Record]:
    match fmt:
        case "csv":
            yield from csv.DictReader(lines)
        case "jsonl":
            for line_number, line in enumerate(lines, start=1):
                if not line.strip():
                    continue
                record = json.loads(line)
                if not isinstance(record, dict):
                    raise ValueError(f"Line {line_number} is not a JSON object")
                yield record


def load_records(path: str | Path, fmt: RecordFormat | None = None) -> list[Record]:
    """Read every record from a CSV or JSON-lines file.

    Args:
        path: File to read, or ``-`` for standard input.
        fmt: Input format. Inferred from the file extension when omitted
            (``.csv`` is CSV, anything else JSON lines).

    Returns:
        The records in file order.
    """
    fmt = fmt or _infer_format(path)
    with _open_text(path) as f:
        records = list(_parse(f, fmt))
    logger.debug("Loaded %d %s records from %s", len(records), fmt, path)
    return records


def _integer(value: Any) -> int:
    """Read a field as an integer, refusing anything that would lose data."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        return int(value)
    raise TypeError(f"Expected an integer, got {type(value).__name__} {value!r}")


def _number(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        return float(value)
    raise TypeError(f"Expected a number, got {type(value).__name__} {value!r}")


def _greater_by(field: str):
    def keep_greater(key: Any, best: Record, record: Record) -> Record:
        return record if _number(record[field]) > _number(best[field]) else best

    return keep_greater


def tally(records: Iterable[Record], options: TallyOptions) -> dict[Any, Any]:
    """Compute the requested measure for each distinct key.

    Returns:
        A dict from key to measure, in order of each key's first appearance.
    """
    groups = grouping_by(records, lambda record: record[options.key])
    field = cast(str, options.field)
    match options.measure:
        case "count":
            return groups.count_each(options.policy)
        case "sum":
            return groups.sum_each_by(lambda record: _integer(record[field]), options.policy)
        case "max":
            best = groups.reduce(_greater_by(field))
            # single-record groups never reach the comparison
            for record in best.values():
                _number(record[field])
            return {key: record[field] for key, record in best.items()}


def format_tally(result: dict[Any, Any]) -> str:
    return "".join(f"{key}\t{value}\n" for key, value in result.items())
