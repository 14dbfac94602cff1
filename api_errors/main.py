"""FastAPI application entrypoint wired with the API error handlers."""

from fastapi import FastAPI

from api_errors.core.errors import register_error_handlers

app = FastAPI(title="API Error Handler")
register_error_handlers(app)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check stub endpoint for service readiness."""
    return {"status": "ok"}
