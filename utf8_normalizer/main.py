import logging
from typing import Optional

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from .config import get_config
from .errors import UTF8CoercionError
from .models import CoerceResponse, CoercionFailureDetail, EnsureResponse, HealthResponse
from .normalize import coerce_bytes, ensure_bytes, suggest_encoding

config = get_config()
logging.getLogger("utf8_normalizer").setLevel(config.log_level)

app = FastAPI(
    title="utf8-normalizer",
    description="Deterministic UTF-8 normalization of text of uncertain encoding",
    version="0.1.0",
)


async def _read_upload(file: UploadFile) -> bytes:
    raw = await file.read()
    if len(raw) > config.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Upload exceeds {config.max_upload_bytes} bytes",
        )
    return raw


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/ensure", response_model=EnsureResponse)
async def ensure(file: UploadFile = File(...), encoding: Optional[str] = Form(None)):
    raw = await _read_upload(file)
    try:
        return ensure_bytes(raw, encoding)
    except UTF8CoercionError as exc:
        suggested = suggest_encoding(raw) if config.suggest else None
        detail = CoercionFailureDetail(tried=list(exc.tried), suggested=suggested)
        raise HTTPException(status_code=422, detail=detail.model_dump())
    except LookupError:
        raise HTTPException(status_code=422, detail=f"Unknown encoding: {encoding}")


@app.post("/coerce", response_model=CoerceResponse)
async def coerce(file: UploadFile = File(...), encoding: Optional[str] = Form(None)):
    raw = await _read_upload(file)
    try:
        return coerce_bytes(raw, encoding)
    except LookupError:
        raise HTTPException(status_code=422, detail=f"Unknown encoding: {encoding}")
