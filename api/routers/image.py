"""
Image API Router - Single image rendering, batches and presets
"""

import json
import logging
import time
from typing import Iterator, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response, StreamingResponse

from api.dependencies import get_config, get_render_service
from api.exceptions import safe_endpoint
from core.image.converters import ImageConverters
from imaging.presets import list_presets
from schemas import BatchRequest, PresetInfo, RenderPlan, RenderRequest, RenderResponse
from services.render_service import RenderService

logger = logging.getLogger(__name__)

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/x-ndjson"


@router.post("/process")
@safe_endpoint
async def process_image(
    request: RenderRequest, render_service: RenderService = Depends(get_render_service)
) -> RenderResponse:
    """
    Render a single image.

    The source is sent as base64 (plain or data URL); the rendered output
    comes back as base64 with the mime type actually produced.
    """
    encoded, processing_time_ms = await run_in_threadpool(render_service.process_one, request)

    return RenderResponse(
        encoded_bytes=ImageConverters.to_base64(encoded.data),
        output_mime=encoded.mime_type,
        width=encoded.width,
        height=encoded.height,
        processing_time_ms=processing_time_ms,
    )


@router.post("/process-file")
@safe_endpoint
async def process_file(
    file: UploadFile = File(...),
    options: Optional[str] = Form(None, description="RenderPlan as JSON"),
    preset: Optional[str] = Form(None),
    render_service: RenderService = Depends(get_render_service),
    config: dict = Depends(get_config),
) -> Response:
    """Render an uploaded file and return the encoded bytes directly."""
    max_upload_mb = config.get("render", {}).get("max_upload_mb", 50)
    limit = int(max_upload_mb * 1024 * 1024)
    too_large = HTTPException(status_code=413, detail=f"Upload exceeds {max_upload_mb} MB")

    if file.size is not None and file.size > limit:
        raise too_large
    # Never read more than one byte past the limit
    source = await file.read(limit + 1)
    if len(source) > limit:
        raise too_large

    try:
        plan = RenderPlan.model_validate(json.loads(options) if options else {})
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Options are not valid JSON: {e}")

    encoded, processing_time_ms = await run_in_threadpool(
        render_service.process_bytes, source, plan, preset, file.filename or ""
    )

    return Response(
        content=encoded.data,
        media_type=encoded.mime_type,
        headers={"X-Processing-Time-Ms": str(processing_time_ms)},
    )


def _stream_events(render_service: RenderService, request: BatchRequest, batch_id: str) -> Iterator[str]:
    try:
        for event in render_service.iter_batch(request.items, batch_id):
            message = event.to_message()
            yield message.model_dump_json(by_alias=True, exclude_none=True) + "\n"
    finally:
        render_service.finish_batch(batch_id)


def _register_batch(render_service: RenderService, batch_id: Optional[str]) -> str:
    if batch_id and render_service.is_active(batch_id):
        raise HTTPException(status_code=409, detail=f"Batch {batch_id} is already running")
    return render_service.start_batch(batch_id)


@router.post("/batch")
@safe_endpoint
async def process_batch(
    request: BatchRequest,
    batch_id: Optional[str] = Query(None, description="Client chosen id for cancellation"),
    render_service: RenderService = Depends(get_render_service),
) -> StreamingResponse:
    """
    Render a batch and stream the events as newline-delimited JSON.

    Events: item, progress, done, error, cancelled. The batch id needed for
    cancellation is returned in the X-Batch-Id header.
    """
    batch_id = _register_batch(render_service, batch_id)
    logger.info(f"Streaming batch {batch_id} with {len(request.items)} item(s)")

    return StreamingResponse(
        _stream_events(render_service, request, batch_id),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"X-Batch-Id": batch_id},
    )


@router.delete("/batch/{batch_id}")
@safe_endpoint
async def cancel_batch(
    batch_id: str, render_service: RenderService = Depends(get_render_service)
) -> dict:
    """Request cancellation of a running batch (effective at the next item)."""
    if not render_service.cancel_batch(batch_id):
        raise HTTPException(status_code=404, detail=f"Batch {batch_id} not found")
    return {"batch_id": batch_id, "cancelled": True}


@router.post("/batch/zip")
@safe_endpoint
async def process_batch_zip(
    request: BatchRequest,
    batch_id: Optional[str] = Query(None, description="Client chosen id for cancellation"),
    render_service: RenderService = Depends(get_render_service),
) -> Response:
    """
    Render a batch and return every output in a single ZIP archive.

    The archive is only sent once the batch is complete, so a client that
    wants to cancel it picks the batch_id itself and calls
    DELETE /batch/{batch_id} while the request is running. A cancelled
    bundle answers 409.
    """
    batch_id = _register_batch(render_service, batch_id)
    try:
        archive = await run_in_threadpool(render_service.bundle_zip, request.items, batch_id)
    finally:
        render_service.finish_batch(batch_id)
    filename = f"images-{int(time.time() * 1000)}.zip"

    return Response(
        content=archive,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Batch-Id": batch_id,
        },
    )


@router.get("/presets")
@safe_endpoint
async def get_presets() -> List[PresetInfo]:
    """List the named filter presets."""
    return list_presets()
