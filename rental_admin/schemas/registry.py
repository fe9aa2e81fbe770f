from typing import Optional

from pydantic import BaseModel, ConfigDict


class ClienteUpsert(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    nome: Optional[str] = None
    indirizzo_spedizione: Optional[str] = None
    telefono: Optional[str] = None


class MaterialeUpsert(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    nome: Optional[str] = None
    quantita_disponibile: Optional[int] = None
    prezzo_weekend: Optional[float] = None
