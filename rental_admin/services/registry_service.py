from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.rental_models import Cliente, Materiale, Ordine
from schemas.registry import ClienteUpsert, MaterialeUpsert
from services.pricing_service import to_amount


class RecordNotFoundError(LookupError):
    pass


class DependentOrdersError(RuntimeError):
    """Raised when a customer or material is still referenced by an order."""


def serialize_cliente(cliente: Cliente) -> dict:
    return {
        "id": cliente.id,
        "nome": cliente.nome,
        "indirizzo_spedizione": cliente.indirizzo_spedizione,
        "telefono": cliente.telefono,
    }


def serialize_materiale(materiale: Materiale) -> dict:
    return {
        "id": materiale.id,
        "nome": materiale.nome,
        "quantita_disponibile": materiale.quantita_disponibile,
        "prezzo_weekend": to_amount(materiale.prezzo_weekend),
    }


def _has_orders(db: Session, column, record_id: int) -> bool:
    found = db.execute(select(Ordine.id).where(column == record_id).limit(1)).first()
    return found is not None


# Customers


def list_clienti(db: Session) -> list[Cliente]:
    return list(db.execute(select(Cliente).order_by(Cliente.id.asc())).scalars().all())


def create_cliente(db: Session, payload: ClienteUpsert) -> Cliente:
    cliente = Cliente(
        nome=payload.nome,
        indirizzo_spedizione=payload.indirizzo_spedizione,
        telefono=payload.telefono,
    )
    db.add(cliente)
    db.commit()
    db.refresh(cliente)
    return cliente


def update_cliente(db: Session, cliente_id: int, payload: ClienteUpsert) -> Cliente:
    cliente = db.get(Cliente, cliente_id)
    if not cliente:
        raise RecordNotFoundError(f"Cliente {cliente_id} non trovato")
    cliente.nome = payload.nome
    cliente.indirizzo_spedizione = payload.indirizzo_spedizione
    cliente.telefono = payload.telefono
    db.commit()
    db.refresh(cliente)
    return cliente


def delete_cliente(db: Session, cliente_id: int) -> None:
    if _has_orders(db, Ordine.cliente_id, cliente_id):
        raise DependentOrdersError("Cliente con ordini: non eliminabile")
    cliente = db.get(Cliente, cliente_id)
    if cliente:
        db.delete(cliente)
        db.commit()


# Materials


def list_materiali(db: Session) -> list[Materiale]:
    stmt = select(Materiale).order_by(Materiale.nome.asc(), Materiale.id.asc())
    return list(db.execute(stmt).scalars().all())


def create_materiale(db: Session, payload: MaterialeUpsert) -> Materiale:
    materiale = Materiale(
        nome=payload.nome,
        quantita_disponibile=payload.quantita_disponibile,
        prezzo_weekend=payload.prezzo_weekend,
    )
    db.add(materiale)
    db.commit()
    db.refresh(materiale)
    return materiale


def update_materiale(db: Session, materiale_id: int, payload: MaterialeUpsert) -> Materiale:
    materiale = db.get(Materiale, materiale_id)
    if not materiale:
        raise RecordNotFoundError(f"Materiale {materiale_id} non trovato")
    # Existing order totals keep the price they were created with.
    materiale.nome = payload.nome
    materiale.quantita_disponibile = payload.quantita_disponibile
    materiale.prezzo_weekend = payload.prezzo_weekend
    db.commit()
    db.refresh(materiale)
    return materiale


def delete_materiale(db: Session, materiale_id: int) -> None:
    if _has_orders(db, Ordine.materiale_id, materiale_id):
        raise DependentOrdersError("Materiale usato in ordini: non eliminabile")
    materiale = db.get(Materiale, materiale_id)
    if materiale:
        db.delete(materiale)
        db.commit()
