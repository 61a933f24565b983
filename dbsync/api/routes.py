"""HTTP routes for comparison, migration and file transfer."""

import structlog
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from dbsync.errors import HandleValidationError
from dbsync.files.file_store import FileStore, StoredFileNotFoundError
from dbsync.sync.models import CompareReport, ErrorReport, MigrateReport
from dbsync.sync.sync_coordinator import SyncCoordinator

log = structlog.stdlib.get_logger()

sync_router = APIRouter(tags=["sync"])
files_router = APIRouter(tags=["files"])
download_router = APIRouter(tags=["files"])


def get_coordinator(request: Request) -> SyncCoordinator:
    return request.app.state.coordinator


def get_file_store(request: Request) -> FileStore:
    return request.app.state.file_store


def error_response(status_code: int, message: str) -> JSONResponse:
    """Render a failed request as ``{success: false, error}``."""
    body = ErrorReport(error=message).model_dump(by_alias=True)
    return JSONResponse(status_code=status_code, content=body)


@sync_router.get(
    "/compare",
    response_model=CompareReport,
    responses={400: {"model": ErrorReport}, 500: {"model": ErrorReport}},
)
def compare_databases(
    from_: str | None = Query(default=None, alias="from", description="Source handle"),
    to: str | None = Query(default=None, description="Target handle"),
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    """Compare the last window of rows of every common table."""
    try:
        return coordinator.compare(from_, to)
    except HandleValidationError as e:
        log.warning("compare_rejected", source=from_, target=to, error=str(e))
        return error_response(400, str(e))
    except Exception as e:
        log.error("compare_failed", source=from_, target=to, error=str(e))
        return error_response(500, f"Database comparison failed: {e}")


@sync_router.get(
    "/migrate",
    response_model=MigrateReport,
    responses={400: {"model": ErrorReport}, 500: {"model": ErrorReport}},
)
def migrate_data(
    from_: str | None = Query(default=None, alias="from", description="Source handle"),
    to: str | None = Query(default=None, description="Target handle"),
    coordinator: SyncCoordinator = Depends(get_coordinator),
):
    """Merge the last window of rows of every source table into the target."""
    try:
        return coordinator.migrate(from_, to)
    except HandleValidationError as e:
        log.warning("migrate_rejected", source=from_, target=to, error=str(e))
        return error_response(400, str(e))
    except Exception as e:
        log.error("migrate_failed", source=from_, target=to, error=str(e))
        return error_response(500, f"Data migration failed: {e}")


@files_router.post("/files/upload")
def upload_file(
    file: UploadFile | None = File(default=None),
    store: FileStore = Depends(get_file_store),
):
    """Store an uploaded file under a generated unique name."""
    if file is None or not file.file.read(1):
        return error_response(400, "Please select a file to upload")
    file.file.seek(0)

    try:
        stored_name = store.save(file.file, file.filename)
    except OSError as e:
        log.error("file_upload_failed", filename=file.filename, error=str(e))
        return error_response(500, f"File upload failed: {e}")

    return {
        "success": True,
        "message": f"File uploaded successfully: {stored_name}",
        "filename": stored_name,
    }


@download_router.get("/download")
def download_file(
    name: str = Query(..., description="Stored file name"),
    store: FileStore = Depends(get_file_store),
):
    """Stream a stored file back as an attachment."""
    try:
        path = store.resolve(name)
    except StoredFileNotFoundError:
        log.info("file_not_found", name=name)
        return error_response(404, f"File not found: {name}")

    return FileResponse(
        path,
        media_type=store.content_type(path),
        headers={"Content-Disposition": f"attachment; filename={name}"},
    )
