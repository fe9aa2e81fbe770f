from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from models.rental_models import Materiale, Ordine


LOW_STOCK_RATIO = 0.1


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def low_stock_threshold(stock_total: int) -> int:
    # Never below one unit, otherwise small inventories could not flag.
    return max(1, math.floor(int(stock_total or 0) * LOW_STOCK_RATIO))


def is_low_stock(available: int, stock_total: int) -> bool:
    return available <= low_stock_threshold(stock_total)


def build_availability_row(material_id: int, nome: str | None, stock_total: int | None, occupied: int | None) -> dict:
    stock = int(stock_total or 0)
    occupied_qty = int(occupied or 0)
    available = stock - occupied_qty
    return {
        "id": material_id,
        "nome": nome,
        "stock_totale": stock,
        "occupati": occupied_qty,
        "disponibili": available,
        "low_stock": is_low_stock(available, stock),
    }


def compute_availability(materials: Iterable[Any], orders: Iterable[Any]) -> list[dict]:
    """Derive occupied/available counts per material from the current orders.

    Only orders not yet returned (``ritirato`` false) occupy stock; delivered
    and paid flags play no part. ``disponibili`` is left negative when a
    material is overbooked.
    """
    occupied_by_material: dict[int, int] = {}
    for order in orders:
        if bool(_field(order, "ritirato", False)):
            continue
        material_id = _field(order, "materiale_id")
        occupied_by_material[material_id] = occupied_by_material.get(material_id, 0) + int(_field(order, "quantita") or 0)

    rows = [
        build_availability_row(
            _field(material, "id"),
            _field(material, "nome"),
            _field(material, "quantita_disponibile"),
            occupied_by_material.get(_field(material, "id"), 0),
        )
        for material in materials
    ]
    # Unnamed materials sort last, like NULLS LAST in the store query.
    rows.sort(key=lambda row: (row["nome"] is None, row["nome"] or "", row["id"]))
    return rows


def get_material_availability(db: Session) -> list[dict]:
    occupied = func.coalesce(
        func.sum(case((Ordine.ritirato == False, Ordine.quantita), else_=0)),
        0,
    )
    stmt = (
        select(
            Materiale.id,
            Materiale.nome,
            Materiale.quantita_disponibile,
            occupied.label("occupati"),
        )
        .outerjoin(Ordine, Ordine.materiale_id == Materiale.id)
        .group_by(Materiale.id, Materiale.nome, Materiale.quantita_disponibile)
        .order_by(Materiale.nome.asc().nulls_last(), Materiale.id.asc())
    )
    return [
        build_availability_row(row.id, row.nome, row.quantita_disponibile, row.occupati)
        for row in db.execute(stmt).all()
    ]
