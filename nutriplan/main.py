# nutriplan backend api
# fastapi app with async mongodb, jwt auth, patient records, meal plans and monthly reports

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nutriplan.config import settings
from nutriplan.services.db import db
from nutriplan.routers import auth, patients, assessments, meals, reports

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting NutriPlan backend...")
    await db.connect()
    logger.info("NutriPlan backend ready")
    yield
    logger.info("Shutting down NutriPlan backend...")
    await db.close()


app = FastAPI(
    title="NutriPlan API",
    description="Backend API for nutrition practices: patients, assessments, meal plans and monthly reports",
    version="0.1.0",
    lifespan=lifespan,
)

# cors — allow frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(auth.router)
app.include_router(patients.router)
app.include_router(assessments.router)
app.include_router(meals.router)
app.include_router(reports.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "nutriplan-api"}
