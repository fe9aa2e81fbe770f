from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from models.rental_models import Cliente, Materiale, Ordine
from schemas.orders import CreateOrderDto, UpdateOrderDto
from services.pricing_service import compute_total, to_amount


ORDERS_LOGGER = logging.getLogger("rental_admin.orders")


class OrderNotFoundError(LookupError):
    pass


class MaterialNotFoundError(ValueError):
    def __init__(self, materiale_id: int | None, line_number: int | None = None):
        self.materiale_id = materiale_id
        self.line_number = line_number
        if line_number is None:
            message = f"Materiale non valido (materiale_id={materiale_id})"
        else:
            message = f"Materiale non valido alla riga {line_number} (materiale_id={materiale_id})"
        super().__init__(message)


class ClienteNotFoundError(ValueError):
    def __init__(self, cliente_id: int | None):
        self.cliente_id = cliente_id
        super().__init__(f"Cliente non valido (cliente_id={cliente_id})")


def _require_cliente(db: Session, cliente_id: int | None) -> Cliente:
    cliente = db.get(Cliente, cliente_id) if cliente_id is not None else None
    if not cliente:
        raise ClienteNotFoundError(cliente_id)
    return cliente


def _get_materiale(db: Session, materiale_id: int | None) -> Materiale | None:
    if materiale_id is None:
        return None
    return db.get(Materiale, materiale_id)


def serialize_ordine(ordine: Ordine) -> dict:
    return {
        "id": ordine.id,
        "cliente_id": ordine.cliente_id,
        "materiale_id": ordine.materiale_id,
        "quantita": ordine.quantita,
        "data_consegna": ordine.data_consegna,
        "data_ritiro": ordine.data_ritiro,
        "km": to_amount(ordine.km),
        "totale": to_amount(ordine.totale),
        "consegnato": bool(ordine.consegnato),
        "ritirato": bool(ordine.ritirato),
        "pagato": bool(ordine.pagato),
        "note": ordine.note,
    }


def create_orders(db: Session, payload: CreateOrderDto) -> list[Ordine]:
    """Insert one order row per material line, all in a single transaction.

    Every line takes a snapshot of its material's current weekend price. An
    unknown customer, or an unknown material on any line, rolls back the
    whole request.
    """
    multi_line = payload.is_multi_line
    created: list[Ordine] = []
    try:
        _require_cliente(db, payload.cliente_id)

        for line_number, line in enumerate(payload.order_lines(), start=1):
            materiale = _get_materiale(db, line.materiale_id)
            if not materiale:
                raise MaterialNotFoundError(line.materiale_id, line_number if multi_line else None)

            ordine = Ordine(
                cliente_id=payload.cliente_id,
                materiale_id=materiale.id,
                quantita=line.quantita,
                data_consegna=payload.data_consegna,
                data_ritiro=payload.data_ritiro,
                km=payload.km,
                totale=compute_total(materiale.prezzo_weekend, line.quantita, payload.km),
                consegnato=False,
                ritirato=False,
                pagato=False,
                note=payload.note or None,
            )
            db.add(ordine)
            created.append(ordine)
        db.commit()
    except Exception:
        db.rollback()
        raise

    for ordine in created:
        db.refresh(ordine)
    ORDERS_LOGGER.info(
        "Orders created cliente_id=%s order_ids=%s",
        payload.cliente_id,
        ",".join(str(ordine.id) for ordine in created),
    )
    return created


def list_orders(db: Session) -> list[dict]:
    stmt = (
        select(
            Ordine.id,
            Ordine.cliente_id,
            Ordine.materiale_id,
            Cliente.nome.label("cliente"),
            Cliente.indirizzo_spedizione,
            Materiale.nome.label("materiale"),
            Ordine.quantita,
            Ordine.km,
            Ordine.totale,
            Ordine.consegnato,
            Ordine.ritirato,
            Ordine.pagato,
            Ordine.note,
            Ordine.data_consegna,
            Ordine.data_ritiro,
        )
        .join(Cliente, Cliente.id == Ordine.cliente_id)
        .join(Materiale, Materiale.id == Ordine.materiale_id)
        .order_by(Ordine.data_consegna.desc(), Ordine.id.desc())
    )
    rows = []
    for row in db.execute(stmt).mappings().all():
        item = dict(row)
        item["km"] = to_amount(item["km"])
        item["totale"] = to_amount(item["totale"])
        for flag in ("consegnato", "ritirato", "pagato"):
            item[flag] = bool(item[flag])
        rows.append(item)
    return rows


def update_order(db: Session, order_id: int, payload: UpdateOrderDto) -> Ordine:
    ordine = db.get(Ordine, order_id)
    if not ordine:
        raise OrderNotFoundError(f"Ordine {order_id} non trovato")
    _require_cliente(db, payload.cliente_id)
    materiale = _get_materiale(db, payload.materiale_id)
    if not materiale:
        raise MaterialNotFoundError(payload.materiale_id)

    # Re-price from the material as it is now, not as it was at creation.
    ordine.cliente_id = payload.cliente_id
    ordine.materiale_id = materiale.id
    ordine.quantita = payload.quantita
    ordine.data_consegna = payload.data_consegna
    ordine.data_ritiro = payload.data_ritiro
    ordine.km = payload.km
    ordine.totale = compute_total(materiale.prezzo_weekend, payload.quantita, payload.km)
    ordine.note = payload.note or None
    db.commit()
    db.refresh(ordine)
    ORDERS_LOGGER.info("Order updated order_id=%s totale=%s", ordine.id, ordine.totale)
    return ordine


def update_order_status(db: Session, order_id: int, consegnato, ritirato, pagato) -> Ordine:
    ordine = db.get(Ordine, order_id)
    if not ordine:
        raise OrderNotFoundError(f"Ordine {order_id} non trovato")
    ordine.consegnato = bool(consegnato)
    ordine.ritirato = bool(ritirato)
    ordine.pagato = bool(pagato)
    db.commit()
    db.refresh(ordine)
    ORDERS_LOGGER.info(
        "Order status order_id=%s consegnato=%s ritirato=%s pagato=%s",
        ordine.id,
        ordine.consegnato,
        ordine.ritirato,
        ordine.pagato,
    )
    return ordine


def delete_order(db: Session, order_id: int) -> None:
    db.execute(delete(Ordine).where(Ordine.id == order_id))
    db.commit()
    ORDERS_LOGGER.info("Order deleted order_id=%s", order_id)
