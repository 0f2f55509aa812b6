from typing import Annotated

from fastapi import APIRouter, Depends

from profiteer.api.dependencies import get_engine
from profiteer.api.schemas import DiscrepancyReport, DiscrepancyRequest, PortfolioRequest
from profiteer.domain import reconstruction
from profiteer.engine import LedgerEngine
from profiteer.models import PortfolioSummary

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


@router.post("", response_model=PortfolioSummary)
def portfolio(
    req: PortfolioRequest,
    engine: Annotated[LedgerEngine, Depends(get_engine)],
) -> PortfolioSummary:
    return engine.aggregate_portfolio(
        req.wallets,
        req.transactions,
        req.rates,
        default_currency=req.default_currency,
        period=req.period,
    )


@router.post("/discrepancies", response_model=DiscrepancyReport)
def discrepancies(
    req: DiscrepancyRequest,
    engine: Annotated[LedgerEngine, Depends(get_engine)],
) -> DiscrepancyReport:
    entries = engine.running_balances(req.wallets, req.transactions)
    first = next((entry.transaction.id for entry in entries if entry.is_first_discrepancy), None)
    return DiscrepancyReport(
        physical_total=reconstruction.physical_total(req.wallets),
        logical_total=reconstruction.logical_total(req.wallets),
        has_discrepancy=engine.has_discrepancy(req.wallets),
        first_discrepancy_id=first,
        running_balances=entries,
    )
