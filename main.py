from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
import uvicorn

import config
from auth import auth_router
from database import init_db
from jobs import create_scheduler
from router import router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("budget-tracker")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    scheduler = None
    if config.SCHEDULER_ENABLED:
        scheduler = create_scheduler()
        scheduler.start()
        logger.info("Scheduler started")
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Personal Budget Tracker API", lifespan=lifespan)

app.include_router(router, prefix="/api", tags=["finance"])
app.include_router(auth_router, prefix="/auth", tags=["authentication"])


@app.get("/")
def home():
    return {"message": "Welcome to Personal Budget Tracker API"}


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
