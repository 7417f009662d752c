from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class WhatsAppCredentials(BaseModel):
    phone_number_id: str = Field(min_length=1)
    access_token: str = Field(min_length=1)
    verify_token: Optional[str] = None
