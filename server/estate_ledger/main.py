import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import configure_logging
from .errors import LedgerError, http_status_for
from .routers import accounts, billing, health, journal_entries, reports, residents

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


app = FastAPI(title="Estate Ledger API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
def ledger_error_handler(request: Request, exc: LedgerError):
    status_code = http_status_for(exc)
    logger.info("%s %s rejected (%s): %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(journal_entries.router)
app.include_router(residents.router)
app.include_router(billing.router)
app.include_router(reports.router)


@app.get("/")
def root():
    return {"status": "ok"}
