"""Patch notes router: public read, admin write."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from kingdom.auth.dependencies import require_admin
from kingdom.config import get_settings
from kingdom.db.models import User
from kingdom.patch_notes.service import read_patch_notes, write_patch_notes

router = APIRouter(prefix="/api/patch-notes", tags=["Patch Notes"])


class PatchNotesUpdate(BaseModel):
    patch_notes: str


class PatchNotesResponse(BaseModel):
    patch_notes: str
    updated_at: str | None = None
    updated_by: str | None = None


@router.get("", response_model=PatchNotesResponse)
async def get_patch_notes() -> PatchNotesResponse:
    notes = read_patch_notes(get_settings().patch_notes_path)
    return PatchNotesResponse(patch_notes=notes.content, updated_at=notes.updated_at, updated_by=notes.updated_by)


@router.put("", response_model=PatchNotesResponse)
async def put_patch_notes(
    body: PatchNotesUpdate,
    admin: User = Depends(require_admin),
) -> PatchNotesResponse:
    notes = write_patch_notes(get_settings().patch_notes_path, body.patch_notes, admin.username)
    return PatchNotesResponse(patch_notes=notes.content, updated_at=notes.updated_at, updated_by=notes.updated_by)
