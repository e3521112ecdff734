from fastapi import FastAPI

from dyor_scan.delivery.web.routes import router
from dyor_scan.scan.service import ScanService


def create_app(service: ScanService) -> FastAPI:
    app = FastAPI(title="DYOR Scan API", version="0.1.0")
    app.state.scan_service = service
    app.include_router(router)
    return app
