# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Component ORM model – one inventory line owned by one user."""

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base

# Conventional values for ``status``; stored as free text and not enforced.
STATUS_VALUES = ("Available", "Low Stock", "Out of Stock")

# Largest value an Integer column holds on every supported backend (MySQL INT).
INT_MAX = 2**31 - 1

# Upper bound for Numeric(10, 2).
PRICE_MAX = 99_999_999.99


class Component(Base):
    __tablename__ = "components"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    type = Column(String(128), nullable=True)
    quantity = Column(Integer, nullable=False, default=0, server_default="0")
    supplier = Column(String(255), nullable=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    status = Column(String(32), nullable=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(512), nullable=True)
    # Rows created before ownership existed have NULL here and are not
    # reachable through the API until claimed (bin/claim_components.py).
    # Cascade delete: removing a user removes their components.
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    last_updated = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
