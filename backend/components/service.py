# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Inventory operations, always scoped to the requesting user.

Every query filters on both the row id and ``user_id``.  A row that exists
but belongs to someone else is reported exactly like a missing row
(NotFoundError), so ids cannot be probed across accounts.
"""

import io
import math
from datetime import datetime, timezone
from typing import Any, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.errors import NotFoundError, ValidationError
from core.logger import logger
from core.storage import ImageUpload, delete_image
from models.component import INT_MAX, PRICE_MAX, Component
from components.schemas import ComponentFields

_NOT_FOUND = "Component not found"


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_quantity(value: Any, errors: List[str]) -> int:
    if _blank(value):
        return 0
    if isinstance(value, bool):
        errors.append("quantity must be an integer")
        return 0
    try:
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(value)
            quantity = int(value)
        else:
            quantity = int(str(value).strip())
    except ValueError:
        errors.append("quantity must be an integer")
        return 0
    if quantity < 0:
        errors.append("Quantity cannot be negative")
    elif quantity > INT_MAX:
        errors.append("quantity is too large")
    return quantity


def _parse_price(value: Any, errors: List[str]) -> Optional[float]:
    if _blank(value):
        return None
    if isinstance(value, bool):
        errors.append("price must be a number")
        return None
    try:
        price = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        errors.append("price must be a number")
        return None
    if not math.isfinite(price):
        errors.append("price must be a number")
        return None
    if price < 0:
        errors.append("Price cannot be negative")
    elif price > PRICE_MAX:
        errors.append("price is too large")
    return price


def _optional(value: Optional[str]) -> Optional[str]:
    return None if _blank(value) else value


def validate_fields(fields: ComponentFields) -> dict:
    """
    Check *fields* and return the column values to write.

    All problems are collected before raising so that the caller sees every
    offending field in one response.
    """
    errors: List[str] = []
    if _blank(fields.name):
        errors.append("name is required")
    quantity = _parse_quantity(fields.quantity, errors)
    price = _parse_price(fields.price, errors)
    if errors:
        raise ValidationError(errors=errors)

    return {
        "name": fields.name.strip(),
        "type": _optional(fields.type),
        "quantity": quantity,
        "supplier": _optional(fields.supplier),
        "price": price,
        "status": _optional(fields.status),
        "description": _optional(fields.description),
    }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ComponentService:
    def __init__(self, db: Session):
        self.db = db

    def _owned(self, component_id: int, owner_id: int) -> Component:
        # ids beyond the column range cannot exist; the driver would overflow
        if not 0 < component_id <= INT_MAX:
            raise NotFoundError(_NOT_FOUND)
        component = (
            self.db.query(Component)
            .filter(Component.id == component_id, Component.user_id == owner_id)
            .first()
        )
        if not component:
            raise NotFoundError(_NOT_FOUND)
        return component

    def _commit(self, image_url: Optional[str]) -> None:
        """Commit, removing a freshly stored image if the write fails."""
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            if image_url:
                delete_image(image_url)
            raise

    def create(self, fields: ComponentFields, owner_id: int, image: Optional[ImageUpload] = None) -> Component:
        values = validate_fields(fields)
        image_url = image.save() if image else None
        component = Component(**values, image_url=image_url, user_id=owner_id)
        self.db.add(component)
        self._commit(image_url)
        self.db.refresh(component)
        logger.info("component created | id=%d user_id=%d", component.id, owner_id)
        return component

    def list(self, owner_id: int) -> List[Component]:
        return (
            self.db.query(Component)
            .filter(Component.user_id == owner_id)
            .order_by(Component.id)
            .all()
        )

    def get(self, component_id: int, owner_id: int) -> Component:
        return self._owned(component_id, owner_id)

    def update(
        self,
        component_id: int,
        fields: ComponentFields,
        owner_id: int,
        image: Optional[ImageUpload] = None,
    ) -> Component:
        """
        Full replace: every field not sent is reset (optionals to NULL,
        quantity to 0).  The image is only replaced when a new one is given,
        and it is written only once the row is known to be the caller's.
        """
        values = validate_fields(fields)
        component = self._owned(component_id, owner_id)

        for column, value in values.items():
            setattr(component, column, value)
        image_url = image.save() if image else None
        if image_url is not None:
            component.image_url = image_url
        component.last_updated = datetime.now(timezone.utc)

        self._commit(image_url)
        self.db.refresh(component)
        logger.info("component updated | id=%d user_id=%d", component_id, owner_id)
        return component

    def delete(self, component_id: int, owner_id: int) -> None:
        if not 0 < component_id <= INT_MAX:
            raise NotFoundError(_NOT_FOUND)
        deleted = (
            self.db.query(Component)
            .filter(Component.id == component_id, Component.user_id == owner_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise NotFoundError(_NOT_FOUND)
        self.db.commit()
        logger.info("component deleted | id=%d user_id=%d", component_id, owner_id)

    def summary(self, owner_id: int) -> dict:
        """Stock totals for the dashboard: all rows, then one count per status."""
        rows = (
            self.db.query(Component.status, func.count(Component.id))
            .filter(Component.user_id == owner_id)
            .group_by(Component.status)
            .all()
        )
        counts = dict(rows)
        return {
            "total": sum(counts.values()),
            "available": counts.get("Available", 0),
            "low_stock": counts.get("Low Stock", 0),
            "out_of_stock": counts.get("Out of Stock", 0),
        }

    # -- Excel export -------------------------------------------------------

    def export(self, owner_id: int) -> io.BytesIO:
        """Build an .xlsx workbook of the owner's components, in memory."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Components"

        ws.append(_EXPORT_HEADERS)
        for cell in ws[1]:
            cell.font = _HEADER_FONT
            cell.fill = _HEADER_FILL
            cell.alignment = _HEADER_ALIGN
            cell.border = _THIN_BORDER

        components = self.list(owner_id)
        for c in components:
            ws.append([
                c.name,
                c.type or "",
                c.quantity,
                c.supplier or "",
                c.price if c.price is not None else "",
                c.status or "",
                c.description or "",
                c.last_updated.strftime("%Y-%m-%d %H:%M:%S") if c.last_updated else "",
            ])
            for cell in ws[ws.max_row]:
                cell.border = _THIN_BORDER

        for col_idx, width in enumerate(_COL_WIDTHS, start=1):
            ws.column_dimensions[chr(64 + col_idx)].width = width

        buf = io.BytesIO()
        wb.save(buf)
        buf.seek(0)
        logger.info("components exported | user_id=%d rows=%d", owner_id, len(components))
        return buf


_EXPORT_HEADERS = ["Name", "Type", "Quantity", "Supplier", "Price", "Status", "Description", "Last Updated"]
_COL_WIDTHS = [28, 18, 10, 24, 10, 14, 40, 20]

_HEADER_FONT = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="2F5597", end_color="2F5597", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_THIN_BORDER = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)
