from fastapi import APIRouter, HTTPException

from profiteer.api.schemas import CurrencyResponse
from profiteer.domain.currencies import CurrencyCategory, currency_info, list_currencies
from profiteer.domain.errors import UnknownCurrency

router = APIRouter(prefix="/api/currencies", tags=["currencies"])


@router.get("", response_model=list[CurrencyResponse])
def get_currencies(category: CurrencyCategory | None = None) -> list[CurrencyResponse]:
    return [CurrencyResponse.from_info(info) for info in list_currencies(category)]


@router.get("/{code}", response_model=CurrencyResponse)
def get_currency(code: str) -> CurrencyResponse:
    try:
        info = currency_info(code)
    except UnknownCurrency as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return CurrencyResponse.from_info(info)
