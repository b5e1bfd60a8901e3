from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime
import time
from mangum import Mangum

from app.core.config import settings
from app.core.errors import LessonValidationError
from app.core.logging import logger
from app.models.lesson import format_validation_errors
from app.routers import teacher

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="AI-assisted lesson packages for Ghanaian JHS and SHS classrooms",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(f"{request.method} {request.url.path} - {process_time:.2f}s")
    return response

app.include_router(teacher.router)

# ============================================
# BASIC ENDPOINTS
# ============================================

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs",
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": settings.app_version,
        "environment": settings.environment,
        "components": {
            "llm": "configured" if settings.has_llm_credentials else "not configured",
            "provider": settings.provider,
            "model": settings.llm_model,
        }
    }

# ============================================
# ERROR HANDLERS
# ============================================

def _validation_response(details):
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request payload", "details": details}
    )

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = format_validation_errors(exc.errors())
    logger.info(f"Rejected {request.url.path}: {[d['field'] for d in details]}")
    return _validation_response(details)

@app.exception_handler(LessonValidationError)
async def lesson_validation_handler(request: Request, exc: LessonValidationError):
    logger.info(f"Rejected {request.url.path}: {[d['field'] for d in exc.details]}")
    return _validation_response(exc.details)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Unable to generate lesson package at this time."}
    )

# ============================================
# STARTUP/SHUTDOWN
# ============================================

@app.on_event("startup")
async def startup_event():
    logger.info("=" * 50)
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"🤖 LLM ({settings.provider}): {'✓' if settings.has_llm_credentials else '✗ (fallback templates only)'}")
    logger.info("=" * 50)

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("👋 Shutting down application...")

# ============================================
# ✅ MANGUM HANDLER FOR VERCEL - PUT AT THE END
# ============================================

handler = Mangum(app)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
