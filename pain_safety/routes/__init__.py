from .pain import router as pain_router

__all__ = ["pain_router"]
