import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers.admin import router as admin_router
from routers.health import router as health_router
from routers.marking import router as marking_router
from routers.questions import router as questions_router
from routers.sessions import router as sessions_router

logger = logging.getLogger("ace-exam")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Ace Exam – Session API")

# Exam web client origins
_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-api-key", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(sessions_router)  # /exam-sessions/...
app.include_router(marking_router)  # /evaluate, /equivalent, /mark
app.include_router(questions_router)  # /questions/...
app.include_router(admin_router)  # /admin/...
app.include_router(health_router)  # /health/...
