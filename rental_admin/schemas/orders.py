from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class OrderLineDto(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    materiale_id: Optional[int] = None
    quantita: Optional[int] = None


class CreateOrderDto(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    cliente_id: Optional[int] = None
    materiali: Optional[List[OrderLineDto]] = None
    materiale_id: Optional[int] = None
    quantita: Optional[int] = None
    data_consegna: Optional[date] = None
    data_ritiro: Optional[date] = None
    km: Optional[float] = None
    note: Optional[str] = None

    def order_lines(self) -> list[OrderLineDto]:
        if self.materiali:
            return list(self.materiali)
        return [OrderLineDto(materiale_id=self.materiale_id, quantita=self.quantita)]

    @property
    def is_multi_line(self) -> bool:
        return bool(self.materiali)


class UpdateOrderDto(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    cliente_id: Optional[int] = None
    materiale_id: Optional[int] = None
    quantita: Optional[int] = None
    data_consegna: Optional[date] = None
    data_ritiro: Optional[date] = None
    km: Optional[float] = None
    note: Optional[str] = None
