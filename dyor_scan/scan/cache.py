"""Scan result cache keyed by contract address.

Rows are append-only: a refresh inserts a newer row and reads take the most
recent one, so concurrent scans of one address simply race and the last
write wins.
"""

import json
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dyor_scan.storage.models import ScanRow
from dyor_scan.storage.repository import get_latest_scan, save_scan

logger = logging.getLogger(__name__)


class ResultCache:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get(self, contract_address: str) -> dict | None:
        async with self.session_factory() as session:
            row = await get_latest_scan(session, contract_address)
        if row is None:
            return None
        try:
            return json.loads(row.result_json)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Corrupt cached scan for %s (row %s)", contract_address[:12], row.id)
            return None

    async def put(self, contract_address: str, result: dict) -> ScanRow:
        row = ScanRow(
            contract_address=contract_address,
            result_json=json.dumps(result, default=str),
        )
        async with self.session_factory() as session:
            row = await save_scan(session, row)
        logger.info("Cached scan for %s (row %s)", contract_address[:12], row.id)
        return row
