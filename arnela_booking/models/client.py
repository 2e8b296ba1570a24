"""Client data models."""

from typing import Optional
from pydantic import Field

from .appointment import ApiModel


class ClientSummary(ApiModel):
    """A client as returned by the backoffice search."""
    id: str = Field(..., description="Client ID")
    first_name: str = Field(default="")
    last_name: str = Field(default="")
    email: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    dni: Optional[str] = Field(default=None, description="Spanish national ID")
    nif: Optional[str] = Field(default=None, description="Tax ID")
    is_active: bool = Field(default=True)

    @property
    def full_name(self) -> str:
        """Get the display name."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def identity_document(self) -> Optional[str]:
        """DNI when present, NIF otherwise."""
        return self.dni or self.nif
