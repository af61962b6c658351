import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".pdf"}


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
async def upload_file(request: Request, file: UploadFile = File(...)):
    """
    Guarda el fichero en el directorio de uploads con un nombre aleatorio y
    devuelve la URL pública (/uploads/<nombre>).
    """
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"File type not allowed: {suffix or 'none'}")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    uploads_dir = Path(request.app.state.settings.uploads_dir)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{suffix}"
    (uploads_dir / filename).write_bytes(content)
    logger.info("Stored upload %s (%d bytes)", filename, len(content))

    return {
        "filename": filename,
        "originalName": file.filename,
        "size": len(content),
        "url": f"/uploads/{filename}",
    }
