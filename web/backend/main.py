"""
FastAPI backend for KDP Cover Studio

Renders wrap-around paperback covers (back, spine, front) for print.
"""

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kdp_cover.config.profiles import load_settings
from web.backend.api import export_api

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="KDP Cover Studio API",
    description="Backend API for rendering print-ready KDP paperback covers",
    version="1.0.0"
)

# CORS middleware - allow frontend to communicate
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite default port
        "http://localhost:3000",  # Alternative React port
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return error messages as JSON."""
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(exc)},
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "KDP Cover Studio API",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    settings = load_settings()
    return {
        "status": "healthy",
        "services": {
            "api": "running",
            "renderer": "ready",
        },
        "spine_profile": settings.spine_profile,
        "export_dpi": settings.export_dpi,
    }


app.include_router(export_api.router, prefix="/api/export", tags=["export"])

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    print("🚀 Starting KDP Cover Studio API...")
    print("📚 API Documentation: http://localhost:8000/docs")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        timeout_keep_alive=300  # large exports
    )
