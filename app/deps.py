# app/deps.py
from functools import lru_cache

from app.config import settings
from app.services.event_emitter import EventEmitter
from app.services.quiz_service import QuizService, QuizSessionRegistry
from app.services.store import QuizStore, create_store

# ----------------------------
# persistence backend (one per process)
# ----------------------------
@lru_cache
def get_store() -> QuizStore:
    return create_store(settings)

# ----------------------------
# live quiz sessions + event relay
# ----------------------------
@lru_cache
def get_quiz_service() -> QuizService:
    return QuizService(
        get_store(),
        pass_threshold=settings.pass_threshold,
        registry=QuizSessionRegistry(settings.session_idle_ttl_seconds),
    )

@lru_cache
def get_emitter() -> EventEmitter:
    return EventEmitter(get_store())
