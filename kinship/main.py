from __future__ import annotations

from fastapi import FastAPI

try:
    from .routes.relationship import router as relationship_router
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from routes.relationship import router as relationship_router

app = FastAPI(title="Kinship API", version="0.1.0")


@app.get("/health")
def health() -> dict[str, str]:
    return {"ok": "true"}


app.include_router(relationship_router)
