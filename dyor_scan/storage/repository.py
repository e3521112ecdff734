from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dyor_scan.storage.models import ScanRow


async def save_scan(session: AsyncSession, row: ScanRow) -> ScanRow:
    session.add(row)
    await session.commit()
    await session.refresh(row)
    return row


async def get_latest_scan(session: AsyncSession, contract_address: str) -> ScanRow | None:
    stmt = (
        select(ScanRow)
        .where(ScanRow.contract_address == contract_address)
        .order_by(ScanRow.created_at.desc(), ScanRow.id.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
