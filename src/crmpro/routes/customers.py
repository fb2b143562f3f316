from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request

from crmpro.models import Source
from crmpro.schemas import CustomerIn, NoteDateIn, NoteIn, ReminderIn, customer_out, note_out
from crmpro.services import customers as customer_service
from crmpro.services import history, scheduler

router = APIRouter(prefix="/customers", tags=["customers"])


def _store(request: Request):
    return request.app.state.store


@router.get("")
async def list_customers(
    request: Request,
    search: str = "",
    source: Optional[Source] = None,
    industry: str = "",
    with_reminder: bool = False,
    inactive: bool = False,
    sort_by: str = "lastContact",
):
    rows = customer_service.query_customers(
        _store(request).all(),
        search=search,
        source=source,
        industry=industry,
        with_reminder=with_reminder,
        inactive=inactive,
        sort_by=sort_by,
    )
    return [
        customer_out(c) | {"stale": customer_service.is_stale_contact(c)}
        for c in rows
    ]


@router.post("", status_code=201)
async def create_customer(request: Request, body: CustomerIn):
    customer = customer_service.create_customer(_store(request), body.to_fields())
    return customer_out(customer)


@router.get("/{customer_id}")
async def customer_detail(request: Request, customer_id: str):
    return customer_out(_store(request).get(customer_id))


@router.put("/{customer_id}")
async def update_customer(request: Request, customer_id: str, body: CustomerIn):
    customer = customer_service.update_customer(_store(request), customer_id, body.to_fields())
    return customer_out(customer)


@router.delete("/{customer_id}")
async def delete_customer(request: Request, customer_id: str):
    customer_service.delete_customer(_store(request), customer_id)
    return {"deleted": customer_id}


@router.get("/{customer_id}/history")
async def customer_history(request: Request, customer_id: str):
    customer = _store(request).get(customer_id)
    return [note_out(n) for n in history.combined_history(customer)]


@router.post("/{customer_id}/notes", status_code=201)
async def add_note(request: Request, customer_id: str, body: NoteIn):
    note = history.add_note(_store(request), customer_id, body.content)
    return note_out(note)


@router.patch("/{customer_id}/notes/{note_id}")
async def edit_note_date(request: Request, customer_id: str, note_id: str, body: NoteDateIn):
    note = history.edit_note_date(_store(request), customer_id, note_id, body.date)
    return note_out(note)


@router.put("/{customer_id}/reminder")
async def set_reminder(request: Request, customer_id: str, body: ReminderIn):
    customer = scheduler.update_reminder(_store(request), customer_id, days=body.days, on=body.on)
    return customer_out(customer)


@router.delete("/{customer_id}/reminder")
async def clear_reminder(request: Request, customer_id: str):
    customer = scheduler.update_reminder(_store(request), customer_id)
    return customer_out(customer)
