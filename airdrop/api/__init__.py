from .routes import router as api_router
