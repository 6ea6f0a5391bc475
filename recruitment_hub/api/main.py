from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recruitment_hub.api import routes_candidates, routes_screening
from recruitment_hub.core.config import get_settings
from recruitment_hub.core.logging import setup_logging

settings = get_settings()
setup_logging(settings.log_level)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
def healthz():
    return {"status": "ok", "service": settings.app_name}


app.include_router(routes_screening.router)
app.include_router(routes_candidates.router)
