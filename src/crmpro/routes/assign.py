from __future__ import annotations

from fastapi import APIRouter, Request

from crmpro.schemas import AssignIn, customer_out, review_out
from crmpro.services.reconcile import NoMatch

router = APIRouter(prefix="/assign", tags=["assign"])


def _session(request: Request):
    return request.app.state.session


@router.post("")
async def preview_assignment(request: Request, body: AssignIn):
    outcome = await _session(request).submit(body.text)
    if isinstance(outcome, NoMatch):
        return {"matched": False, "message": outcome.message}
    return review_out(outcome)


@router.post("/apply")
async def apply_assignment(request: Request):
    return customer_out(_session(request).apply_and_note())


@router.post("/note")
async def note_only_assignment(request: Request):
    return customer_out(_session(request).note_only())


@router.delete("")
async def discard_assignment(request: Request):
    _session(request).discard()
    return {"discarded": True}
