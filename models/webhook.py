from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class EmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email_address: str


class UserCreatedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email_addresses: List[EmailAddress] = []
    primary_email_address_id: Optional[str] = None

    def primary_email(self) -> Optional[str]:
        for email in self.email_addresses:
            if email.id == self.primary_email_address_id:
                return email.email_address
        return None


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    data: Dict[str, Any] = {}
