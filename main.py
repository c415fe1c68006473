"""
MotoRide trip engine: ASGI entry point.

    uvicorn main:app --reload

Expects PostgreSQL/PostGIS carrying the schema in ``migrations/versions``
and Redis, both at the URLs configured in ``src.config.Settings``.
"""

import uvicorn

from src.api.app import create_app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
