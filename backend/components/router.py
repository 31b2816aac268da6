# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Component endpoints – CRUD over the caller's inventory, stock totals and an
Excel export.

Security rules enforced by every handler
----------------------------------------
* A valid access token is required on every endpoint (``require_identity``).
* Every service call receives the caller's ``Identity`` and filters on its
  user id.  Another user's component answers 404, exactly like a missing one.
"""

import json
from typing import Optional, Tuple

import pydantic
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from database import get_db
from core.errors import ValidationError
from core.responses import success_response
from core.security import Identity, require_identity
from core.storage import ImageUpload, read_image
from components.schemas import ComponentFields, ComponentResponse, ComponentSummary
from components.service import ComponentService

router = APIRouter(prefix="/components", tags=["components"])

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


# ---------------------------------------------------------------------------
# Body parsing
# ---------------------------------------------------------------------------


async def read_component_body(request: Request) -> Tuple[ComponentFields, Optional[ImageUpload]]:
    """
    Dependency: read a component from a multipart/urlencoded form or a JSON
    body.  An ``image`` file part, if present, is checked and returned
    alongside the fields; the service decides whether it gets written.
    """
    upload = None
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        raw = {}
        for key, value in form.multi_items():
            if key == "image":
                if isinstance(value, UploadFile) and value.filename:
                    upload = value
            elif isinstance(value, str):
                raw[key] = value
    else:
        body = await request.body()
        try:
            raw = json.loads(body) if body else {}
        except ValueError:
            raise ValidationError("Malformed JSON body")
        if not isinstance(raw, dict):
            raise ValidationError("Request body must be an object")

    try:
        fields = ComponentFields.model_validate(raw)
    except pydantic.ValidationError as exc:
        raise ValidationError(errors=[
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ])

    image = await read_image(upload) if upload is not None else None
    return fields, image


def _dump(component) -> dict:
    return ComponentResponse.model_validate(component).model_dump()


# ---------------------------------------------------------------------------
# GET /components  – list the caller's components
# ---------------------------------------------------------------------------


@router.get("")
def list_components(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
):
    components = ComponentService(db).list(identity.user_id)
    return success_response(
        "Components fetched successfully",
        [_dump(c) for c in components],
    )


# ---------------------------------------------------------------------------
# POST /components  – create
# ---------------------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED)
def create_component(
    identity: Identity = Depends(require_identity),
    body: Tuple[ComponentFields, Optional[ImageUpload]] = Depends(read_component_body),
    db: Session = Depends(get_db),
):
    """Create a component owned by the caller.  ``image`` is optional."""
    fields, image = body
    component = ComponentService(db).create(fields, identity.user_id, image)
    return success_response(
        "Component created successfully",
        _dump(component),
        status.HTTP_201_CREATED,
    )


# ---------------------------------------------------------------------------
# GET /components/summary  – dashboard totals
# ---------------------------------------------------------------------------
# This route and /export are declared before /{component_id} so that their
# names are not taken for an id.


@router.get("/summary")
def summarize_components(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
):
    totals = ComponentSummary.model_validate(ComponentService(db).summary(identity.user_id))
    return success_response("Summary fetched successfully", totals.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# GET /components/export  – download as an Excel workbook
# ---------------------------------------------------------------------------


@router.get("/export")
def export_components(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
):
    buf = ComponentService(db).export(identity.user_id)
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="components.xlsx"'},
    )


# ---------------------------------------------------------------------------
# GET /components/{id}
# ---------------------------------------------------------------------------


@router.get("/{component_id}")
def get_component(
    component_id: int,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
):
    component = ComponentService(db).get(component_id, identity.user_id)
    return success_response("Component fetched successfully", _dump(component))


# ---------------------------------------------------------------------------
# PUT /components/{id}  – full replace
# ---------------------------------------------------------------------------


@router.put("/{component_id}")
def update_component(
    component_id: int,
    identity: Identity = Depends(require_identity),
    body: Tuple[ComponentFields, Optional[ImageUpload]] = Depends(read_component_body),
    db: Session = Depends(get_db),
):
    """
    Replace every field of the component.  Fields left out are cleared, so
    clients must resend the whole record.  The image is kept unless a new
    one is uploaded.
    """
    fields, image = body
    component = ComponentService(db).update(component_id, fields, identity.user_id, image)
    return success_response("Component updated successfully", _dump(component))


# ---------------------------------------------------------------------------
# DELETE /components/{id}
# ---------------------------------------------------------------------------


@router.delete("/{component_id}")
def delete_component(
    component_id: int,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db),
):
    ComponentService(db).delete(component_id, identity.user_id)
    return success_response("Component deleted successfully")
