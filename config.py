import os

# Remote session service consumed by the client side
EXAM_API_BASE_URL = os.getenv("EXAM_API_BASE_URL", "http://localhost:8000")
EXAM_API_KEY = os.getenv("EXAM_API_KEY", "")

HEARTBEAT_INTERVAL_S = float(os.getenv("HEARTBEAT_INTERVAL_S", "15"))

# Durable local snapshot store (one row per session key)
LOCAL_STORE_URL = os.getenv("LOCAL_STORE_URL", "sqlite:///./exam-local.db")
