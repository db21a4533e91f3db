from .resume import router as resume_router
from .compile import router as compile_router
from .models import router as models_router
from .health import router as health_router

__all__ = ["resume_router", "compile_router", "models_router", "health_router"]
