from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from profiteer.api.routes import balances, currencies, health, portfolio, rates
from profiteer.core import settings
from profiteer.domain.errors import (
    CorruptTransaction,
    InvalidTransaction,
    LedgerError,
    UnknownCurrency,
)
from profiteer.engine import LedgerEngine
from profiteer.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _error_response(status_code: int, exc: LedgerError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UnknownCurrency)
    async def unknown_currency_handler(request: Request, exc: UnknownCurrency) -> JSONResponse:
        return _error_response(422, exc)

    @app.exception_handler(InvalidTransaction)
    async def invalid_transaction_handler(request: Request, exc: InvalidTransaction) -> JSONResponse:
        if isinstance(exc, CorruptTransaction):
            logger.error("[API] Corrupt transaction in %s: %s", request.url.path, exc)
        return _error_response(422, exc)

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        return _error_response(400, exc)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing ledger engine...")
        settings.log_environment()

        app.state.engine = LedgerEngine(
            default_currency=settings.get_default_currency(),
            tolerance=settings.get_discrepancy_tolerance(),
            include_initial_balance=settings.get_env_bool("INCLUDE_INITIAL_BALANCE"),
        )

        logger.info("Ledger engine initialized.")
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Profiteer", lifespan=lifespan)
    register_exception_handlers(app)

    app.include_router(balances.router)
    app.include_router(rates.router)
    app.include_router(portfolio.router)
    app.include_router(currencies.router)
    app.include_router(health.router)

    return app


app = create_app()
