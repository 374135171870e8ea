"""Result sheet endpoints: ranking, CSV export and sheet imports."""

from io import BytesIO

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import StreamingResponse

from edurank.core.config import settings
from edurank.core.database import DbSession
from edurank.core.dependencies import CurrentContext, StaffContext
from edurank.core.exceptions import UploadError
from edurank.core.subjects import ClassLevel, ExamType
from edurank.models.audit import AuditAction
from edurank.schemas.results import RankedResultsResponse
from edurank.schemas.student import StudentImportResult
from edurank.services import transfer
from edurank.services.audit import AuditService
from edurank.services.permissions import ensure_admin_action, ensure_class_access
from edurank.services.results import ResultService
from edurank.services.student import StudentService

router = APIRouter()


def _read_upload(file: UploadFile, extensions: tuple[str, ...]) -> bytes:
    # Validate file
    if not file.filename:
        raise UploadError("No file provided")

    if not file.filename.lower().endswith(extensions):
        raise UploadError(f"Only {', '.join(extensions)} files are allowed")

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")
    return content


def _audit_import(db, context, class_level: ClassLevel, exam_type: ExamType, result, filename, http_request):
    AuditService(db).log(
        action=AuditAction.UPLOAD_COMPLETED,
        resource_type="results",
        resource_id=f"{class_level.value}:{exam_type.value}",
        user_id=context.user_id,
        description=f"Imported '{filename}' into class {class_level.value}",
        extra_data={
            "total_rows": result.total_rows,
            "created": result.created,
            "updated": result.updated,
            "failed": len(result.errors),
        },
        ip_address=http_request.client.host if http_request.client else None,
    )


@router.get("", response_model=RankedResultsResponse)
def get_results(
    context: CurrentContext,
    db: DbSession,
    class_level: ClassLevel,
    exam_type: ExamType,
    sort_key: str | None = None,
    search: str | None = None,
):
    """
    Ranked results of a class for an exam period.

    ``sort_key`` orders the sheet by a subject column; ranks always follow
    totals. Students only receive their own row.
    """
    ensure_class_access(context, class_level)
    return ResultService(db).ranked_results(context, class_level, exam_type, sort_key, search)


@router.get("/export")
def export_results(
    context: StaffContext,
    db: DbSession,
    class_level: ClassLevel,
    exam_type: ExamType,
):
    """Download the ranked results of a class as CSV."""
    ensure_class_access(context, class_level)
    content, filename = ResultService(db).export_csv(class_level, exam_type)

    return StreamingResponse(
        BytesIO(content.encode("utf-8")),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/template")
def download_results_template(context: StaffContext, class_level: ClassLevel):
    """Download an Excel template for a class's result sheet."""
    ensure_class_access(context, class_level)
    content = transfer.generate_template(class_level)

    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=class_{class_level.value}_template.xlsx"},
    )


@router.post("/import", response_model=StudentImportResult)
def import_results_csv(
    context: StaffContext,
    db: DbSession,
    http_request: Request,
    class_level: ClassLevel = Form(...),
    exam_type: ExamType = Form(...),
    file: UploadFile = File(...),
):
    """
    Import a CSV result sheet for one exam period.

    Students are matched on roll number; unknown roll numbers are created.
    """
    ensure_admin_action(context, class_level)
    content = _read_upload(file, (".csv",))

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise UploadError("CSV file must be UTF-8 encoded")

    rows = transfer.parse_csv(text, class_level, exam_type)
    result = StudentService(db).import_rows(class_level, rows)

    _audit_import(db, context, class_level, exam_type, result, file.filename, http_request)
    return result


@router.post("/import-excel", response_model=StudentImportResult)
def import_results_excel(
    context: StaffContext,
    db: DbSession,
    http_request: Request,
    class_level: ClassLevel = Form(...),
    exam_type: ExamType = Form(...),
    roll_column: str | None = Form(None),
    name_column: str | None = Form(None),
    file: UploadFile = File(...),
):
    """
    Import an Excel result sheet for one exam period.

    Columns are detected from the header row. Pass ``roll_column`` or
    ``name_column`` when the roll number or name headers are not recognised.
    """
    ensure_admin_action(context, class_level)
    content = _read_upload(file, (".xlsx",))

    rows, errors = transfer.parse_excel(content, class_level, exam_type, roll_column, name_column)
    result = StudentService(db).import_rows(class_level, rows, errors)

    _audit_import(db, context, class_level, exam_type, result, file.filename, http_request)
    return result
