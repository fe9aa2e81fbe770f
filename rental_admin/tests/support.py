import os
import sys
from pathlib import Path


os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "x" * 48)

APP_DIR = Path(__file__).resolve().parents[1]
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from sqlalchemy.orm import sessionmaker

from db.base import Base
from db.engine import build_engine
from models.rental_models import Cliente, Materiale, Ordine


def make_session_factory():
    engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    return engine, factory


def add_cliente(db, nome="Mario Rossi", indirizzo="Via Roma 1", telefono="3331234567") -> Cliente:
    cliente = Cliente(nome=nome, indirizzo_spedizione=indirizzo, telefono=telefono)
    db.add(cliente)
    db.commit()
    return cliente


def add_materiale(db, nome="Gazebo", stock=20, prezzo=10) -> Materiale:
    materiale = Materiale(nome=nome, quantita_disponibile=stock, prezzo_weekend=prezzo)
    db.add(materiale)
    db.commit()
    return materiale


def add_ordine(db, cliente, materiale, quantita=1, data_consegna=None, totale=0, **flags) -> Ordine:
    ordine = Ordine(
        cliente_id=cliente.id,
        materiale_id=materiale.id,
        quantita=quantita,
        data_consegna=data_consegna,
        km=0,
        totale=totale,
        consegnato=flags.get("consegnato", False),
        ritirato=flags.get("ritirato", False),
        pagato=flags.get("pagato", False),
    )
    db.add(ordine)
    db.commit()
    return ordine
