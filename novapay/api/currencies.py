"""
Public currency listing.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from novapay.database import get_db
from novapay.schemas.rate import CurrencyResponse
from novapay.services.rate_catalog import list_currencies

router = APIRouter()


@router.get("/", response_model=list[CurrencyResponse])
async def list_active_currencies(db: AsyncSession = Depends(get_db)):
    """Active currencies, ordered by code."""
    return await list_currencies(db, active_only=True)
