from typing import Annotated

from fastapi import APIRouter, Depends

from profiteer.api.dependencies import get_engine
from profiteer.engine import LedgerEngine

router = APIRouter(tags=["health"])


@router.get("/health")
def health(engine: Annotated[LedgerEngine, Depends(get_engine)]) -> dict[str, str]:
    return {"status": "ok", "default_currency": engine.default_currency}
