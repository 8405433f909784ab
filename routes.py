from fastapi import FastAPI
from controller.storage_controller import storage_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(storage_router)
