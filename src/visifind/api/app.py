"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status

from visifind.app_logging import configure_logging
from visifind.containers import AppContainer
from visifind.domain.backup import ImportResult
from visifind.domain.errors import MalformedImportDocument


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        state_container.bookmark_service.load()
        state_container.background_service.load()
        state_container.search_settings_service.load()
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/backup/export")
    async def export_backup(request: Request) -> Response:
        """Return a full backup as a downloadable JSON file."""
        state_container: AppContainer = request.app.state.container
        backup = state_container.backup_service.export_document()
        return Response(
            content=backup.content,
            media_type=backup.media_type,
            headers={
                "Content-Disposition": f'attachment; filename="{backup.filename}"'
            },
        )

    @app.post("/backup/import")
    async def import_backup(request: Request) -> dict[str, object]:
        """Merge an uploaded backup file into the local stores."""
        state_container: AppContainer = request.app.state.container
        body = await request.body()
        try:
            result = state_container.backup_service.import_document(body)
        except MalformedImportDocument as exc:
            logger.warning("Rejected backup import: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Malformed backup document",
            ) from exc
        return _format_import_result(result)

    @app.get("/background/style")
    async def background_style(request: Request) -> dict[str, str]:
        """Return the CSS style for the current background."""
        state_container: AppContainer = request.app.state.container
        return state_container.background_service.render_style().as_css()

    @app.post("/background/bing")
    async def refresh_bing_background(request: Request) -> dict[str, str]:
        """Switch the background to today's Bing wallpaper."""
        state_container: AppContainer = request.app.state.container
        settings = await state_container.background_service.refresh_bing_wallpaper(
            state_container.wallpaper_client
        )
        return {"bingWallpaperUrl": settings.bing_wallpaper_url}

    return app


def _format_import_result(result: ImportResult) -> dict[str, object]:
    return {
        "imported": result.total,
        "bookmarks": result.bookmarks,
        "foods": result.foods,
        "intakeRecords": result.intake_records,
        "failures": [
            {"section": item.section, "name": item.name, "reason": item.reason}
            for item in result.failures
        ],
    }
