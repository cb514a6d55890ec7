"""
Main entry point for CareShare API
"""
import uvicorn

from careshare.config.settings import settings


def run():
    uvicorn.run(
        "careshare.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers
    )


if __name__ == "__main__":
    run()
