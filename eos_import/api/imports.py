"""CSV import endpoints: type catalogue, upload + preview, import, templates."""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile

from eos_import.api.deps import get_acting_user, get_orchestrator
from eos_import.core import import_types
from eos_import.core.config import settings
from eos_import.core.errors import (
    InvalidUploadError,
    ParseError,
    UnsupportedTypeError,
    UploadNotFoundError,
    UploadOwnershipError,
    UploadTooLargeError,
)
from eos_import.core.file_parser import EXCEL_SUFFIXES, SUPPORTED_SUFFIXES
from eos_import.core.import_engine import ImportOrchestrator
from eos_import.core.models import (
    ImportRequest,
    ImportResponse,
    ImportTypesResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/import-types", response_model=ImportTypesResponse, response_model_by_alias=True)
async def get_import_types():
    """List every importable type with its fields and a sample row."""
    return ImportTypesResponse(types=import_types.list_types())


@router.post("/upload", response_model=UploadResponse, response_model_by_alias=True)
async def upload_file(
    csv_file: Optional[UploadFile] = File(None, alias="csvFile"),
    import_type: Optional[str] = Form(None, alias="type"),
    user_id: str = Depends(get_acting_user),
    orchestrator: ImportOrchestrator = Depends(get_orchestrator),
):
    """Upload a CSV or Excel file, parse it and validate every row.

    - **csvFile**: the file (.csv, .txt, .xlsx, .xlsm)
    - **type**: import type, e.g. `rocks`

    The returned filename is passed back to `/import` to run the import.
    """
    if csv_file is None or not csv_file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    suffix = Path(csv_file.filename).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise HTTPException(
            status_code=400,
            detail=f"Only CSV and Excel files ({', '.join(sorted(SUPPORTED_SUFFIXES))}) are supported",
        )

    try:
        preview = orchestrator.preview_upload(csv_file.file, csv_file.filename, import_type, user_id)
    except UnsupportedTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except ParseError as e:
        raise HTTPException(status_code=400, detail=f"Could not parse file: {e}")
    except Exception as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to process uploaded file: {e}")
    finally:
        await csv_file.close()

    file_kind = "Excel" if suffix in EXCEL_SUFFIXES else "CSV"
    return UploadResponse(
        message=f"{file_kind} file uploaded and parsed successfully",
        filename=preview.filename,
        type=preview.import_type,
        record_count=preview.record_count,
        preview=preview.preview,
        headers=preview.headers,
        validation_errors=[str(e) for e in preview.validation_errors],
        parse_errors=[str(e) for e in preview.parse_errors],
        is_valid=preview.is_valid,
    )


@router.post("/import", response_model=ImportResponse, response_model_by_alias=True)
async def import_data(
    body: ImportRequest,
    user_id: str = Depends(get_acting_user),
    orchestrator: ImportOrchestrator = Depends(get_orchestrator),
):
    """Import a previously uploaded file.

    Rows that fail are reported in `errors`; the rest are imported.
    """
    organization_id = body.organization_id or settings.default_organization_id

    try:
        report = orchestrator.run_import(body.filename, body.type, organization_id, user_id)
    except UnsupportedTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UploadNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UploadOwnershipError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidUploadError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    except ParseError as e:
        raise HTTPException(status_code=400, detail=f"Could not parse file: {e}")
    except Exception as e:
        logger.error(f"Import failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Import failed: {e}")

    return ImportResponse(
        message=f"Import completed. {report.imported_count} records imported successfully.",
        imported_count=report.imported_count,
        total_rows=report.total_rows,
        errors=report.errors,
        has_errors=report.has_errors,
        results=report.results,
    )


@router.get("/template/{import_type}")
async def download_template(import_type: str):
    """Download a CSV template (header row + one sample row) for a type."""
    try:
        content = import_types.template(import_type)
    except UnsupportedTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={import_type}_template.csv"},
    )
