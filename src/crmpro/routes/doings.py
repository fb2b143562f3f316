from __future__ import annotations

from fastapi import APIRouter, Request

from crmpro.schemas import RescheduleIn, customer_out, task_out
from crmpro.services import scheduler

router = APIRouter(prefix="/doings", tags=["doings"])


def _store(request: Request):
    return request.app.state.store


@router.get("")
async def list_doings(request: Request):
    return [task_out(t) for t in scheduler.open_tasks(_store(request).all())]


@router.get("/upcoming")
async def upcoming_doings(request: Request, limit: int = 5):
    return [task_out(t) for t in scheduler.upcoming_tasks(_store(request).all(), limit=limit)]


@router.post("/{customer_id}/complete")
async def complete_doing(request: Request, customer_id: str):
    return customer_out(scheduler.complete_task(_store(request), customer_id))


@router.post("/{customer_id}/reschedule")
async def reschedule_doing(request: Request, customer_id: str, body: RescheduleIn):
    return customer_out(scheduler.reschedule_task(_store(request), customer_id, body.days))
