from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

EMP_SQL = "CREATE TABLE EMP (ID NUMBER PRIMARY KEY, NAME VARCHAR(50) NOT NULL);"
ORD_SQL = "CREATE TABLE ORD (ID NUMBER, EMP_ID NUMBER, FOREIGN KEY (EMP_ID) REFERENCES EMP(ID));"


@pytest.fixture
def emp_sql():
    return EMP_SQL


@pytest.fixture
def emp_ord_sql():
    return ORD_SQL + "\n" + EMP_SQL


@pytest.fixture
def make_dump():
    """Builds a dump of tables T1..Tn, each with a primary key and a REF_ID column"""

    def _make_dump(count: int, extra: str = "") -> str:
        statements = [
            f"CREATE TABLE T{i} (ID NUMBER PRIMARY KEY, REF_ID NUMBER);" for i in range(1, count + 1)
        ]
        return "\n".join(statements) + "\n" + extra

    return _make_dump
