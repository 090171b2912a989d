import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from familytree.database import Base, engine
from familytree.config import settings

# Import models so SQLAlchemy registers tables
from familytree.models import (
    user,
    person,
    marriage,
    story,
    audit_log,
)

# Routers
from familytree.routers import (
    auth_router,
    person_router,
    marriage_router,
    admin_router,
)

# -----------------------
# LOGGING
# -----------------------
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# -----------------------
# CREATE APP
# -----------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend API for the family tree application.",
    version="1.0.0",
)

# -----------------------
# CORS (ONLY ONCE)
# -----------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# DATABASE TABLES
# -----------------------
Base.metadata.create_all(bind=engine)
logger.info("Database ready (%s env)", settings.ENV)

# -----------------------
# ROUTES
# -----------------------
app.include_router(auth_router.router)
app.include_router(person_router.router)
app.include_router(marriage_router.router)
app.include_router(admin_router.router)


# -----------------------
# HEALTH CHECK
# -----------------------
@app.get("/")
def root():
    return {"message": "Family Tree API is running!"}
