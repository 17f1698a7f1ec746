from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Caller identity resolved from a bearer credential.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: str = "authenticated"

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def is_admin(self) -> bool:
        return self.role in ("admin", "service_role")
