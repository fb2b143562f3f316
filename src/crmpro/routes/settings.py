from __future__ import annotations

from fastapi import APIRouter, Request

from crmpro.models import CompanySettings
from crmpro.schemas import SettingsIn

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("")
async def get_settings(request: Request):
    return request.app.state.store.load_settings().to_dict()


@router.put("")
async def update_settings(request: Request, body: SettingsIn):
    settings = CompanySettings(company_name=body.company_name, logo=body.logo)
    request.app.state.store.save_settings(settings)
    return settings.to_dict()
