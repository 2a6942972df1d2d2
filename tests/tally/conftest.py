import json
from pathlib import Path

import pytest


@pytest.fixture
def sales_csv(tmp_path: Path) -> Path:
    path = tmp_path / "sales.csv"
    path.write_text("store,total\nX,10\nY,5\nX,7\n", encoding="utf-8")
    return path


@pytest.fixture
def sales_jsonl(tmp_path: Path) -> Path:
    path = tmp_path / "sales.jsonl"
    rows = [{"store": "X", "total": 10}, {"store": "Y", "total": 5}, {"store": "X", "total": 7}]
    path.write_text("".join(json.dumps(row) + "\n" for row in rows) + "\n", encoding="utf-8")
    return path
