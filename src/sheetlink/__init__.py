"""SheetLink - hyperlink extraction and merging for spreadsheets."""

from sheetlink.api import app, create_app

__all__ = ["app", "create_app"]
__version__ = "0.1.0"


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from sheetlink.config import settings

    uvicorn.run(
        "sheetlink.api:app",
        host=settings.server_host,
        port=settings.server_port,
    )
