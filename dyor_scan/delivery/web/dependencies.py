from fastapi import Request

from dyor_scan.scan.service import ScanService


def get_scan_service(request: Request) -> ScanService:
    return request.app.state.scan_service
