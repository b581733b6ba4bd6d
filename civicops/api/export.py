from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, StreamingResponse
from sqlalchemy.orm import Session
from civicops.core.db import get_db
from civicops.schemas.export import ExportOptions, ExportRequest
from civicops.services.export import ExportService

router = APIRouter(prefix="/export", tags=["Export"])


@router.get("/options", response_model=ExportOptions)
def get_export_options(db: Session = Depends(get_db)):
    """
    Values offered by the export filter form.
    """
    service = ExportService(db)
    return ExportOptions(
        categories=service.get_categories(),
        departments=service.get_departments(),
        employees=service.get_employees(),
    )


@router.post("/csv")
def export_csv(request: ExportRequest, db: Session = Depends(get_db)):
    service = ExportService(db)
    rows = service.get_reports_for_export(request.filters)
    return StreamingResponse(
        service.iter_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={request.filename}.csv"},
    )


@router.post("/html", response_class=HTMLResponse)
def export_html(request: ExportRequest, db: Session = Depends(get_db)):
    """
    Printable HTML table; the browser's print-to-PDF turns it into a PDF.
    """
    service = ExportService(db)
    rows = service.get_reports_for_export(request.filters)
    return HTMLResponse(
        content=service.to_html(rows, title=request.filename),
        headers={"Content-Disposition": f"inline; filename={request.filename}.html"},
    )
