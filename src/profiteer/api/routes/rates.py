from typing import Annotated

from fastapi import APIRouter, Depends

from profiteer.api.dependencies import get_engine
from profiteer.api.schemas import RateResolveRequest
from profiteer.engine import LedgerEngine
from profiteer.models import ConversionFactor, RateUnavailable

router = APIRouter(prefix="/api/rates", tags=["rates"])


@router.post("/resolve", response_model=ConversionFactor | RateUnavailable)
def resolve_rate(
    req: RateResolveRequest,
    engine: Annotated[LedgerEngine, Depends(get_engine)],
) -> ConversionFactor | RateUnavailable:
    return engine.resolve_conversion_factor(
        req.rates, req.from_currency, req.to_currency, req.period
    )
