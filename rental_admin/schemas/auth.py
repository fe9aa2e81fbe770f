from typing import Optional

from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: Optional[str] = None
    password: Optional[str] = None
