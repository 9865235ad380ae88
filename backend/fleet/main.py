import logging
from typing import Optional

import numpy as np
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import devices
from .core.config import settings
from .data.store import DeviceStore

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def create_app(store: Optional[DeviceStore] = None) -> FastAPI:
    app = FastAPI(title="IoT Fleet Dashboard API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
        allow_credentials=True, allow_methods=["*"], allow_headers=["*"],
    )

    app.include_router(devices.router)

    if store is None:
        store = DeviceStore(settings.DATASET_PATH, rng=np.random.default_rng(settings.RANDOM_SEED))
    app.state.store = store

    @app.on_event("startup")
    def on_startup():
        if not app.state.store.loaded:
            app.state.store.load()

    @app.get("/health")
    def health(): return {"ok": True, "devices": len(app.state.store.get_all())}

    return app


app = create_app()
