from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from db.base import Base


class Admin(Base):
    __tablename__ = "admin"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    # pbkdf2_sha256$<iterations>$<salt>$<hex digest>
    password = Column(String(256), nullable=False)


class Cliente(Base):
    __tablename__ = "clienti"

    id = Column(Integer, primary_key=True)
    nome = Column(String(255))
    indirizzo_spedizione = Column(String(500))
    telefono = Column(String(50))

    Ordini = relationship("Ordine", back_populates="Cliente")


class Materiale(Base):
    __tablename__ = "materiali"

    id = Column(Integer, primary_key=True)
    nome = Column(String(255))
    quantita_disponibile = Column(Integer, default=0)
    prezzo_weekend = Column(Numeric(10, 2), default=0)

    Ordini = relationship("Ordine", back_populates="Materiale")


class Ordine(Base):
    __tablename__ = "ordini"

    id = Column(Integer, primary_key=True)
    cliente_id = Column(Integer, ForeignKey("clienti.id"))
    materiale_id = Column(Integer, ForeignKey("materiali.id"))
    quantita = Column(Integer, default=0)
    data_consegna = Column(Date)
    data_ritiro = Column(Date)
    km = Column(Numeric(10, 2), default=0)
    totale = Column(Numeric(12, 2), default=0)
    consegnato = Column(Boolean, nullable=False, default=False)
    ritirato = Column(Boolean, nullable=False, default=False)
    pagato = Column(Boolean, nullable=False, default=False)
    note = Column(Text)

    Cliente = relationship("Cliente", back_populates="Ordini")
    Materiale = relationship("Materiale", back_populates="Ordini")
