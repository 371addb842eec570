# API Routes
from app.api.health import router as health_router
from app.api.sales import router as sales_router

__all__ = ["health_router", "sales_router"]
