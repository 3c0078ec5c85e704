# app/routers/files.py
from urllib.parse import quote

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging_config import get_logger
from app.core.services import Services, get_services

logger = get_logger("files")

router = APIRouter()


def content_disposition(filename: str) -> str:
    return f"attachment; filename*=UTF-8''{quote(filename, safe='')}"


@router.get("/{file_id}")
def download_file(file_id: str, services: Services = Depends(get_services)):
    """
    Download a rendered report by its id.

    Anyone holding the id can download the file; there is no ownership check
    and files never expire.
    """
    if not services.database.available:
        return PlainTextResponse("DB not configured", status_code=500)

    try:
        stored = services.store.get_file(file_id)
    except SQLAlchemyError:
        logger.exception("[FILES] error reading %s", file_id)
        return PlainTextResponse("Internal Error", status_code=500)

    if stored is None:
        return PlainTextResponse("Not found", status_code=404)

    return Response(
        content=stored.data,
        media_type=stored.mime,
        headers={"Content-Disposition": content_disposition(stored.filename)},
    )
