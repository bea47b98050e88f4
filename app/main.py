import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api import health
from app.api.v1.endpoints import auth, community, connections, projects, team_dashboard, users
from app.core.cache import cache_service
from app.core.config import settings
from app.core.exceptions import (
    SkillSyncError,
    request_validation_exception_handler,
    skillsync_exception_handler,
)
from app.core.init_db import init_db
from app.core.metrics import PrometheusMiddleware, metrics_endpoint
from app.db.mongodb import close_mongo_connection, connect_to_mongo

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    SkillSync API: a social network for developers to find collaborators and build teams.

    ## Features
    * **Projects**: Showcase projects, like and comment on them.
    * **Team Requests**: Ask to join a project's team; owners and admins accept or reject.
    * **Team Dashboard**: Per-project task board and discussion board for team members.
    * **Matching**: Developer suggestions ranked by shared skills, interests and goals.
    * **Connections**: Build a network of developers.
    * **Community**: A platform-wide feed of posts with trending tags.

    """,
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

app.add_exception_handler(SkillSyncError, skillsync_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)


@app.on_event("startup")
async def startup_event():
    await connect_to_mongo()
    await init_db()


@app.on_event("shutdown")
async def shutdown_event():
    await cache_service.close()
    await close_mongo_connection()


app.add_route("/metrics", metrics_endpoint, include_in_schema=False)
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(auth.router, prefix=f"{settings.API_V1_STR}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(
    connections.router, prefix=f"{settings.API_V1_STR}/connections", tags=["connections"]
)
app.include_router(
    community.router, prefix=f"{settings.API_V1_STR}/community", tags=["community"]
)
app.include_router(projects.router, prefix=f"{settings.API_V1_STR}/projects", tags=["projects"])
app.include_router(
    team_dashboard.router,
    prefix=f"{settings.API_V1_STR}/team-dashboard",
    tags=["team-dashboard"],
)


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}
