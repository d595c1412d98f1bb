import logging

from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .codec import Document, decode, encode
from .error_handlers import register_error_handlers
from .models import (
    DecodeResponse,
    DecodeSummary,
    DecodeTextRequest,
    EncodeRequest,
    ExportRequest,
    HeaderMapping,
    HealthResponse,
    ImportPreviewResponse,
    TableColumnsResponse,
)
from .settings import configure_logging, settings
from .tables import get_table, map_header, plan_import

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="record-csv",
    description="CSV import/export codec for contact, lead, meeting and deal records",
    version="0.1.0",
)

allowed_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

CSV_MEDIA_TYPE = "text/csv"

async def _read_csv_upload(file: UploadFile) -> str:
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail=f"File too large. Max {settings.max_upload_bytes} bytes")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=422, detail="CSV file must be UTF-8 encoded")

def _decode_response(document: Document) -> DecodeResponse:
    return DecodeResponse(
        headers=document.headers,
        rows=document.rows,
        summary=DecodeSummary(
            rows=len(document.rows),
            columns=len(document.headers),
            ragged_rows=document.ragged_rows(),
        ),
    )

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/decode", response_model=DecodeResponse)
async def decode_csv(file: UploadFile = File(...)):
    text = await _read_csv_upload(file)
    logger.info("decoding upload %s (%d chars)", file.filename, len(text))
    return _decode_response(decode(text))

@app.post("/decode/text", response_model=DecodeResponse)
def decode_text(body: DecodeTextRequest):
    return _decode_response(decode(body.text))

@app.post("/encode")
def encode_csv(body: EncodeRequest):
    return Response(content=encode(body.headers, body.records), media_type=CSV_MEDIA_TYPE)

@app.get("/tables/{table}/columns", response_model=TableColumnsResponse)
def table_columns(table: str):
    columns = get_table(table)
    return TableColumnsResponse(table=columns.name, columns=list(columns.columns), required=list(columns.required))

@app.post("/tables/{table}/export")
def export_table(table: str, body: ExportRequest):
    """
    Export records under the table's columns.

    scope "selected" keeps only records whose `id` is in `selected_ids`;
    "all" and "filtered" export what was sent and differ only in the file name.
    Values are written as sent: text dates are not reformatted.
    """
    columns = get_table(table)
    records = body.records
    if body.scope == "selected":
        wanted = set(body.selected_ids)
        records = [r for r in records if r.get("id") is not None and str(r["id"]) in wanted]
    if not records:
        raise HTTPException(status_code=422, detail="No data to export")

    filename = f"{body.filename}_{body.scope}.csv"
    logger.info("exporting %d %s record(s) to %s", len(records), columns.name, filename)
    return Response(
        content=encode(columns.columns, records),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@app.post("/tables/{table}/import/preview", response_model=ImportPreviewResponse)
async def preview_import(table: str, file: UploadFile = File(...)):
    columns = get_table(table)
    document = decode(await _read_csv_upload(file))
    plan = plan_import(document, columns)
    result = plan.build(document.rows)
    return ImportPreviewResponse(
        table=columns.name,
        mappings=[HeaderMapping(header=h, column=map_header(h, columns)) for h in document.headers],
        ignored=plan.ignored,
        records=result.records,
        errors=result.errors,
    )
