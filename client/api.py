# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Typed wrappers over the /components endpoints."""

from typing import List, Optional, Tuple

from client.session import SessionManager, unwrap

# (filename, bytes, content type) – bytes rather than a file object so that
# the body can be rebuilt if the request is replayed after a refresh.
ImageUpload = Tuple[str, bytes, str]


def _form(fields: dict) -> dict:
    return {key: str(value) for key, value in fields.items() if value is not None}


class ComponentsAPI:
    def __init__(self, session: SessionManager):
        self.session = session

    async def list(self) -> List[dict]:
        return unwrap(await self.session.get("/components"))

    async def get(self, component_id: int) -> dict:
        return unwrap(await self.session.get(f"/components/{component_id}"))

    async def create(self, fields: dict, image: Optional[ImageUpload] = None) -> dict:
        return unwrap(await self.session.post("/components", **self._body(fields, image)))

    async def update(self, component_id: int, fields: dict, image: Optional[ImageUpload] = None) -> dict:
        """Full replace: send every field, not only the changed ones."""
        return unwrap(await self.session.put(f"/components/{component_id}", **self._body(fields, image)))

    async def delete(self, component_id: int) -> None:
        unwrap(await self.session.delete(f"/components/{component_id}"))

    async def summary(self) -> dict:
        """``{total, available, lowStock, outOfStock}`` for the caller's rows."""
        return unwrap(await self.session.get("/components/summary"))

    async def export(self) -> bytes:
        """Download the caller's components as .xlsx bytes."""
        response = await self.session.get("/components/export")
        if not response.is_success:
            unwrap(response)
        return response.content

    @staticmethod
    def _body(fields: dict, image: Optional[ImageUpload]) -> dict:
        if image is None:
            return {"json": fields}
        return {"data": _form(fields), "files": {"image": image}}
