import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from dyor_scan.delivery.web.dependencies import get_scan_service
from dyor_scan.scan.chains import InvalidAddressError, require_chain
from dyor_scan.scan.service import ScanFailedError, ScanService

logger = logging.getLogger(__name__)

router = APIRouter()


class ScanRequest(BaseModel):
    contract_address: str = ""
    force_refresh: bool = False


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/api/scan")
async def api_scan(body: ScanRequest, service: ScanService = Depends(get_scan_service)):
    try:
        return await service.scan(body.contract_address, force_refresh=body.force_refresh)
    except InvalidAddressError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except ScanFailedError as exc:
        logger.error("Scan failed for %s: %s", body.contract_address[:12], exc)
        return JSONResponse({"error": str(exc)}, status_code=500)


@router.post("/api/scan/stream")
async def api_scan_stream(body: ScanRequest, service: ScanService = Depends(get_scan_service)):
    try:
        address, _ = require_chain(body.contract_address)
    except InvalidAddressError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    async def event_source():
        async for event in service.stream(address, force_refresh=body.force_refresh):
            yield event.to_sse()

    return StreamingResponse(
        event_source(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
