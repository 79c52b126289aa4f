"""
DevNote Backend - Uploaded File Route
=====================================

What:  Serves stored avatars at GET /uploads/{path}.
How:   The path is resolved against the upload root by FileService; anything
       outside the root, or not a regular file, is a 404.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import FileResponse

from devnote.exceptions import NotFoundError
from devnote.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])


@router.get("/uploads/{file_path:path}", summary="Serve an uploaded avatar")
async def serve_upload(file_path: str) -> FileResponse:
    resolved = file_service.resolve_public_url(file_path)
    if resolved is None or not resolved.is_file():
        logger.info("Upload not found or outside storage root: %s", file_path)
        raise NotFoundError(resource="file", resource_id=file_path)

    # Avatars are written once under a random name and never modified
    return FileResponse(
        resolved,
        headers={"Cache-Control": "public, max-age=86400, immutable"},
    )
