"""Address, owned by the customer profile, consumed for ownership checks."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Address:
    owner_id: str
    full_name: str
    street: str
    city: str
    postal_code: str
    country: str = "IT"
    id: int | None = None

    def belongs_to(self, holder_id: str) -> bool:
        return self.owner_id == holder_id
