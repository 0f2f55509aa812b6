from fastapi import HTTPException, Request

from profiteer.engine import LedgerEngine


def get_engine(request: Request) -> LedgerEngine:
    engine = getattr(request.app.state, "engine", None)
    if not engine:
        raise HTTPException(status_code=500, detail="Engine not initialized")
    return engine
