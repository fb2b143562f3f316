from __future__ import annotations

from fastapi import APIRouter, File, Request, UploadFile

from crmpro.services.importer import import_file

router = APIRouter(prefix="/import", tags=["import"])


@router.post("")
async def upload_import(request: Request, file: UploadFile = File(...)):
    data = await file.read()
    result = import_file(request.app.state.store, file.filename or "", data)
    return {"accepted": result.accepted, "ids": [c.id for c in result.customers]}
