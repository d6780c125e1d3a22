# app/main.py

# ------------------------
# load environment
# ------------------------
from dotenv import load_dotenv
load_dotenv()

import logging

# ------------------------
# FastAPI, CORS middleware
# ------------------------
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings

# ------------------------
# routers
# ------------------------
from app.routers import viewers as viewers_router
from app.routers import quiz_sessions as quiz_sessions_router
from app.routers import reports as reports_router

# ------------------------
# 0) logging
# ------------------------
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ------------------------
# 1) app
# ------------------------
app = FastAPI(title="Training Quiz API")

# ------------------------
# 2) CORS
# ------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------
# 3) routers
# ------------------------
app.include_router(viewers_router.router)
app.include_router(quiz_sessions_router.router)
app.include_router(reports_router.router)

# ------------------------
# 4) health check
# ------------------------
@app.get("/")
def root():
    return {"ok": True}
