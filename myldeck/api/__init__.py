from myldeck.api.decks import router as decks_router
from myldeck.api.health import router as health_router
from myldeck.api.imports import router as imports_router
from myldeck.api.validation import router as validation_router

__all__ = [
    "decks_router",
    "health_router",
    "imports_router",
    "validation_router",
]
