from __future__ import annotations

from sqlalchemy import case, extract, func, select
from sqlalchemy.orm import Session

from models.rental_models import Materiale, Ordine
from services.pricing_service import to_amount


ITALIAN_MONTHS = (
    "Gennaio",
    "Febbraio",
    "Marzo",
    "Aprile",
    "Maggio",
    "Giugno",
    "Luglio",
    "Agosto",
    "Settembre",
    "Ottobre",
    "Novembre",
    "Dicembre",
)


def month_key(year: int, month: int) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def month_label(month: int) -> str:
    return ITALIAN_MONTHS[int(month) - 1]


def get_monthly_profits(db: Session) -> list[dict]:
    """Paid revenue per delivery month.

    A month shows up as soon as it holds any order; unpaid orders only add zero.
    """
    year = extract("year", Ordine.data_consegna)
    month = extract("month", Ordine.data_consegna)
    paid_total = func.coalesce(
        func.sum(case((Ordine.pagato == True, func.coalesce(Ordine.totale, 0)), else_=0)),
        0,
    )
    stmt = (
        select(year.label("anno"), month.label("mese"), paid_total.label("totale_pagato"))
        .where(Ordine.data_consegna.is_not(None))
        .group_by(year, month)
        .order_by(year.asc(), month.asc())
    )
    return [
        {
            "anno_mese": month_key(row.anno, row.mese),
            "mese": month_label(row.mese),
            "totale_pagato": to_amount(row.totale_pagato),
        }
        for row in db.execute(stmt).all()
    ]


def get_material_order_counts(db: Session) -> list[dict]:
    order_count = func.count(Ordine.id)
    stmt = (
        select(Materiale.nome, order_count.label("numero_ordini"))
        .outerjoin(Ordine, Ordine.materiale_id == Materiale.id)
        .group_by(Materiale.id, Materiale.nome)
        .order_by(order_count.desc(), Materiale.nome.asc())
    )
    return [
        {"nome": row.nome, "numero_ordini": int(row.numero_ordini or 0)}
        for row in db.execute(stmt).all()
    ]
