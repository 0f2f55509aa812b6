from typing import Annotated

from fastapi import APIRouter, Depends

from profiteer.api.dependencies import get_engine
from profiteer.api.schemas import TransactionSnapshot
from profiteer.engine import LedgerEngine
from profiteer.models import PeriodSummary, WalletBalance

router = APIRouter(prefix="/api/wallets", tags=["balances"])


@router.post("/{wallet_id}/balance", response_model=WalletBalance)
def wallet_balance(
    wallet_id: str,
    req: TransactionSnapshot,
    engine: Annotated[LedgerEngine, Depends(get_engine)],
) -> WalletBalance:
    return engine.calculate_wallet_balance(wallet_id, req.transactions)


@router.post("/{wallet_id}/summary", response_model=PeriodSummary)
def wallet_summary(
    wallet_id: str,
    req: TransactionSnapshot,
    engine: Annotated[LedgerEngine, Depends(get_engine)],
) -> PeriodSummary:
    return engine.period_summary(wallet_id, req.transactions)
