"""
Blog Backend — Stored Upload Route
====================================

What:  Serves covers and avatars stored by FileService, so the reference
       URLs kept on posts and authors resolve to the actual images.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.config import settings
from app.exceptions import NotFoundError
from app.services.file_service import file_service

router = APIRouter(prefix=settings.api_prefix, tags=["Files"])


@router.get(
    "/files/{file_path:path}",
    summary="Serve an uploaded image",
    responses={200: {"description": "Image file"}, 404: {"description": "File not found"}},
)
async def serve_file(file_path: str) -> FileResponse:
    # resolve() raises ValidationError (400) for ../ traversal attempts
    full_path = file_service.resolve(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    # media type is guessed from the extension
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
