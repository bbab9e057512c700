import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sidebets.core.config import settings
from sidebets.core.database import init_db
from sidebets.core.errors import SidebetsError
from sidebets.routes import bets, credits, groups, parlays, stats, wagers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="sidebets", debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(groups.router)
app.include_router(credits.router)
app.include_router(bets.router)
app.include_router(wagers.router)
app.include_router(parlays.router)
app.include_router(stats.router)


@app.exception_handler(SidebetsError)
async def sidebets_error_handler(request: Request, exc: SidebetsError):
    logger.warning("%s %s rejected: %s (%s)", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.kind, "detail": exc.message})


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("sidebets started (%s)", settings.ENVIRONMENT)


@app.get("/")
def read_root():
    return {"status": "ok"}
