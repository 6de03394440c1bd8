import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.platform.config import settings
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import LOG_FORMAT

# Configure logging to show INFO level messages
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Crawl a site and audit every page against WCAG A/AA with axe-core",
    version="1.0.0",
    debug=settings.DEBUG,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": f"{settings.APP_NAME} API",
        "description": "Automated WCAG A/AA accessibility reports for public sites.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
        "reports_base": "/reports",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

# Create the reports directory if it doesn't exist
reports_dir = Path(settings.REPORTS_DIR)
reports_dir.mkdir(parents=True, exist_ok=True)

# Serve generated reports: /reports/<report_id>/report.html and report.json
app.mount("/reports", StaticFiles(directory=str(reports_dir)), name="reports")

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
