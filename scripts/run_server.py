"""Run the Sync API with uvicorn using the configured host and port."""
import uvicorn

from sync_app.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "sync_app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
