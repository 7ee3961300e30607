"""
GreenBharat Ride-Hailing Backend
================================
Entry point. Run with: uvicorn main:app --reload
"""

import uvicorn

from greenbharat.api.app import create_app
from greenbharat.config import settings

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
