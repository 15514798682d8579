"""FastAPI entrypoint serving the Imperium simulation."""

from __future__ import annotations

from imperium.api.app import app, create_app

__all__ = ["app", "create_app"]


if __name__ == "__main__":  # pragma: no cover - manual launch helper
    import uvicorn

    uvicorn.run("imperium.api.app:app", host="0.0.0.0", port=8000, reload=True)
