# module bundlestore.catalog.models
"""Types du catalogue (configuration statique, non persistée)."""
from decimal import Decimal
from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict

class Bundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    data_amount: str
    validity: str
    price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["price"] = float(self.price)
        return data

class Provider(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    logo: str
    color: str
    bundles: List[Bundle] = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "logo": self.logo,
            "color": self.color,
            "bundles": [b.to_dict() for b in self.bundles],
        }
