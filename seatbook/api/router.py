from __future__ import annotations

from fastapi import APIRouter

from seatbook.api.routes import admin_blocks, admin_hours, admin_venues, public

api_router = APIRouter()

api_router.include_router(public.router, prefix="/public", tags=["public"])

# Admin
api_router.include_router(admin_venues.router, prefix="/admin/venues", tags=["admin-venues"])
api_router.include_router(admin_hours.router, prefix="/admin/venues", tags=["admin-hours"])
api_router.include_router(admin_blocks.router, prefix="/admin/venues", tags=["admin-blocks"])
