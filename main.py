"""
Development entry point: ``python main.py``.
"""
import uvicorn

from ecomhub.config.settings import get_settings
from ecomhub.main import app

if __name__ == "__main__":
    settings = get_settings()
    if settings.reload:
        uvicorn.run("ecomhub.main:app", host=settings.host, port=settings.port, reload=True)
    else:
        uvicorn.run(app, host=settings.host, port=settings.port)
