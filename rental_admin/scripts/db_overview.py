#!/usr/bin/env python3
"""Database overview and integrity checks for the rental admin store."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

APP_DIR = Path(__file__).resolve().parents[1]
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from db.engine import build_engine
from services.pricing_service import compute_total, to_amount


EXPECTED_COLUMNS: dict[str, list[str]] = {
    "admin": ["id", "username", "password"],
    "clienti": ["id", "nome", "indirizzo_spedizione", "telefono"],
    "materiali": ["id", "nome", "quantita_disponibile", "prezzo_weekend"],
    "ordini": [
        "id",
        "cliente_id",
        "materiale_id",
        "quantita",
        "data_consegna",
        "data_ritiro",
        "km",
        "totale",
        "consegnato",
        "ritirato",
        "pagato",
        "note",
    ],
}
EXPECTED_TABLES = list(EXPECTED_COLUMNS)


@dataclass
class CheckResult:
    name: str
    ok: bool
    detail: str


def _print_section(title: str) -> None:
    print(f"\n=== {title} ===")


def _scalar(engine: Engine, sql: str, params: dict | None = None):
    with engine.connect() as conn:
        return conn.execute(text(sql), params or {}).scalar()


def _rows(engine: Engine, sql: str, params: dict | None = None):
    with engine.connect() as conn:
        return conn.execute(text(sql), params or {}).all()


def _table_names(engine: Engine) -> set[str]:
    return set(inspect(engine).get_table_names())


def _column_names(engine: Engine, table_name: str) -> set[str]:
    return {column["name"] for column in inspect(engine).get_columns(table_name)}


def run_existence_checks(engine: Engine) -> list[CheckResult]:
    present = _table_names(engine)
    return [
        CheckResult(f"table:{table}", table in present, "present" if table in present else "missing")
        for table in EXPECTED_TABLES
    ]


def run_column_checks(engine: Engine) -> list[CheckResult]:
    present = _table_names(engine)
    results: list[CheckResult] = []
    for table, expected in EXPECTED_COLUMNS.items():
        if table not in present:
            results.append(CheckResult(f"columns:{table}", False, "table missing"))
            continue
        actual = _column_names(engine, table)
        missing = [name for name in expected if name not in actual]
        results.append(
            CheckResult(
                f"columns:{table}",
                not missing,
                "ok" if not missing else f"missing={','.join(missing)}",
            )
        )
    return results


def run_integrity_checks(engine: Engine) -> list[CheckResult]:
    checks: list[CheckResult] = []
    present = _table_names(engine)
    if not {"ordini", "clienti", "materiali"} <= present:
        return checks

    orphan_cliente = _scalar(
        engine,
        """
        SELECT COUNT(*)
        FROM ordini o
        LEFT JOIN clienti c ON c.id = o.cliente_id
        WHERE c.id IS NULL
        """,
    )
    checks.append(
        CheckResult(
            "ordini:orphan_cliente_id",
            int(orphan_cliente or 0) == 0,
            f"count={int(orphan_cliente or 0)}",
        )
    )

    orphan_materiale = _scalar(
        engine,
        """
        SELECT COUNT(*)
        FROM ordini o
        LEFT JOIN materiali m ON m.id = o.materiale_id
        WHERE m.id IS NULL
        """,
    )
    checks.append(
        CheckResult(
            "ordini:orphan_materiale_id",
            int(orphan_materiale or 0) == 0,
            f"count={int(orphan_materiale or 0)}",
        )
    )

    # Totals are price snapshots, so drift only means the price changed since.
    drifted = 0
    for quantita, km, totale, prezzo in _rows(
        engine,
        """
        SELECT o.quantita, o.km, o.totale, m.prezzo_weekend
        FROM ordini o
        JOIN materiali m ON m.id = o.materiale_id
        """,
    ):
        if abs(compute_total(prezzo, quantita, km) - to_amount(totale)) > 0.005:
            drifted += 1
    checks.append(CheckResult("ordini:total_differs_from_current_price", True, f"count={drifted}"))

    overbooked = _rows(
        engine,
        """
        SELECT m.nome,
               m.quantita_disponibile - COALESCE(SUM(CASE WHEN o.ritirato = :returned THEN 0 ELSE o.quantita END), 0) AS disponibili
        FROM materiali m
        LEFT JOIN ordini o ON o.materiale_id = m.id
        GROUP BY m.id, m.nome, m.quantita_disponibile
        """,
        {"returned": True},
    )
    negative = [str(row[0]) for row in overbooked if row[1] is not None and int(row[1]) < 0]
    checks.append(
        CheckResult(
            "materiali:overbooked",
            not negative,
            f"count={len(negative)}" + (f" names={','.join(negative)}" if negative else ""),
        )
    )
    return checks


def _print_results(title: str, rows: Iterable[CheckResult]) -> None:
    _print_section(title)
    for row in rows:
        status = "OK" if row.ok else "FAIL"
        print(f"[{status}] {row.name} :: {row.detail}")


def _print_row_counts(engine: Engine) -> None:
    _print_section("Row Counts")
    present = _table_names(engine)
    for table in EXPECTED_TABLES:
        if table not in present:
            print(f"{table}: missing")
            continue
        count = _scalar(engine, f"SELECT COUNT(*) FROM {table}")
        print(f"{table}: {int(count or 0)}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Rental admin DB overview")
    parser.add_argument("--db-url", default=os.environ.get("DATABASE_URL", ""))
    args = parser.parse_args(argv)

    db_url = (args.db_url or "").strip()
    if not db_url:
        print("DATABASE_URL is not set. Provide --db-url or export env first.")
        return 2

    try:
        engine = build_engine(db_url)
        _scalar(engine, "SELECT 1")
    except SQLAlchemyError as exc:
        print(f"Could not connect to DB: {exc}")
        return 3

    _print_results("Table Existence", run_existence_checks(engine))
    _print_results("Column Checks", run_column_checks(engine))
    _print_results("Integrity Checks", run_integrity_checks(engine))
    _print_row_counts(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
