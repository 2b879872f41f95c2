import os
import sys
import logging
from contextlib import asynccontextmanager

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ENABLE_SCHEDULERS
from database import init_db
from scheduler import DailyResetScheduler
from routes.stats_routes import router as stats_router
from routes.avatar_routes import router as avatar_router
from routes.habit_routes import router as habit_router
from routes.note_routes import router as note_router
from routes.goal_routes import router as goal_router
from routes.admin_routes import router as admin_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    scheduler = app.state.reset_scheduler
    if ENABLE_SCHEDULERS:
        logger.info("Initializing daily reset scheduler...")
        scheduler.initialize()
    else:
        logger.info("Schedulers are disabled (ENABLE_SCHEDULERS is not true).")
    yield
    scheduler.stop()


app = FastAPI(title="Outdoor Habits API", lifespan=lifespan)
app.state.reset_scheduler = DailyResetScheduler()


@app.get("/api/v1/health-check")
async def health():
    return {
        "status": "ok",
        "message": "Backend is alive!",
        "schedulers": ENABLE_SCHEDULERS,
        "reset_scheduler_running": app.state.reset_scheduler.is_running,
    }


# Configure CORS for Mobile App Support
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this to your app origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(stats_router)
app.include_router(avatar_router)
app.include_router(habit_router)
app.include_router(note_router)
app.include_router(goal_router)
app.include_router(admin_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
