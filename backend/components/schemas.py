# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the component endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# -- Requests --------------------------------------------------------------
# Bodies arrive as multipart forms (strings) or JSON (typed), so the numeric
# fields are kept raw here and parsed by ComponentService, which reports every
# bad field at once.


class ComponentFields(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    quantity: Any = None
    supplier: Optional[str] = None
    price: Any = None
    status: Optional[str] = None
    description: Optional[str] = None


# -- Responses -------------------------------------------------------------


class ComponentResponse(BaseModel):
    id: int
    name: str
    type: Optional[str]
    quantity: int
    supplier: Optional[str]
    price: Optional[float]
    status: Optional[str]
    description: Optional[str]
    image_url: Optional[str]
    user_id: Optional[int]
    last_updated: datetime

    model_config = {"from_attributes": True}


class ComponentSummary(BaseModel):
    """Dashboard totals; keys go out camelCased (lowStock, outOfStock)."""

    total: int
    available: int
    low_stock: int
    out_of_stock: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
