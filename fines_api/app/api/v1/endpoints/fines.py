"""
Fine endpoints.

CRUD routes for the ``fines`` resource plus ``PATCH /fines/{id}/paid``.
Each request gets its own database connection through ``get_db``; the
``FineService`` built on top of it carries all business rules.  Errors
are raised as ``FineServiceError`` subclasses and rendered by the
application's exception handlers.
"""

import sqlite3
from typing import Optional

from fastapi import APIRouter, Body, Depends, Response, status

from fines_api.app.core.db import get_db
from fines_api.app.core.exceptions import NotFoundError
from fines_api.app.schemas.fine import FineCreate, FineList, FineRead, FineReplace, FineUpdate
from fines_api.app.services.fine_service import FineService, parse_page_param

router = APIRouter()


def get_fine_service(conn: sqlite3.Connection = Depends(get_db)) -> FineService:
    return FineService(conn)


@router.get("", response_model=FineList)
async def list_fines(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    service: FineService = Depends(get_fine_service),
) -> FineList:
    """Return fines newest first.

    ``limit`` is clamped to 1..100 (default 50) and ``offset`` to 0 or
    more; values that are not numbers count as 0, so a bad parameter
    never fails the request.  Overdue penalties are applied before the
    page is read.
    """
    page = await service.list_fines(limit=parse_page_param(limit), offset=parse_page_param(offset))
    return FineList(data=page["items"], limit=page["limit"], offset=page["offset"])


@router.post("", response_model=FineRead, status_code=status.HTTP_201_CREATED)
async def create_fine(fine_in: FineCreate, service: FineService = Depends(get_fine_service)) -> FineRead:
    """Create a fine.

    ``status`` defaults to ``unpaid``.  Offenders with three or more
    unpaid fines get a 50.0 surcharge on the new one.
    """
    return await service.create_fine(fine_in)


@router.get("/{fine_id}", response_model=FineRead)
async def get_fine(fine_id: int, service: FineService = Depends(get_fine_service)) -> FineRead:
    fine = await service.get_fine(fine_id)
    if fine is None:
        raise NotFoundError()
    return fine


@router.put("/{fine_id}", response_model=FineRead)
async def replace_fine(
    fine_id: int,
    fine_in: FineReplace,
    service: FineService = Depends(get_fine_service),
) -> FineRead:
    """Overwrite all fields of a fine.  No business rules are re-applied."""
    fine = await service.replace_fine(fine_id, fine_in)
    if fine is None:
        raise NotFoundError()
    return fine


@router.patch("/{fine_id}", response_model=FineRead)
async def update_fine(
    fine_id: int,
    fine_in: Optional[FineUpdate] = Body(None),
    service: FineService = Depends(get_fine_service),
) -> FineRead:
    """Update the supplied fields of a fine; unknown fields are ignored.

    A request without a body is answered like an empty object.
    """
    fine = await service.update_fine(fine_id, fine_in if fine_in is not None else FineUpdate())
    if fine is None:
        raise NotFoundError()
    return fine


@router.delete("/{fine_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fine(fine_id: int, service: FineService = Depends(get_fine_service)) -> Response:
    deleted = await service.delete_fine(fine_id)
    if not deleted:
        raise NotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{fine_id}/paid", status_code=status.HTTP_204_NO_CONTENT)
async def mark_as_paid(fine_id: int, service: FineService = Depends(get_fine_service)) -> Response:
    """Mark a fine as paid.

    Paying within 14 days of issue takes 10% off.  Returns 404 for an
    unknown fine and 409 if it is already paid.
    """
    await service.mark_as_paid(fine_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
