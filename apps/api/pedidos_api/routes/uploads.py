"""Serve stored payment proofs."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from pedidos_api.dependencies import get_storage
from pedidos_api.storage.service import StorageService

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.get("/{stored_name}")
async def get_upload(stored_name: str, storage: StorageService = Depends(get_storage)):
    """Return the raw bytes of a stored file."""
    try:
        path = storage.path_for(stored_name)
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Archivo no encontrado",
        )
    return FileResponse(path)
