"""
Main FastAPI application entry point

    uvicorn main:app --host 0.0.0.0 --port 8000
"""
from depin.core.config import get_settings
from depin.main import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )
