"""
FastAPI app assembly: logging, middleware, error mapping and router wiring.
"""
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request
from starlette.responses import JSONResponse

load_dotenv()

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

from franchisehub import __version__
from franchisehub.api.activity import router as activity_router
from franchisehub.api.announcements import router as announcements_router
from franchisehub.api.audit_archives import router as audit_archives_router
from franchisehub.api.audit_cleanup import router as audit_cleanup_router
from franchisehub.api.audit_executions import router as audit_executions_router
from franchisehub.api.audit_templates import router as audit_templates_router
from franchisehub.api.auth import router as auth_router
from franchisehub.api.categories import router as categories_router
from franchisehub.api.corrective_actions import router as corrective_actions_router
from franchisehub.api.dashboard import router as dashboard_router
from franchisehub.api.documents import router as documents_router
from franchisehub.api.invites import router as invites_router
from franchisehub.api.non_conformities import router as non_conformities_router
from franchisehub.api.notifications import router as notifications_router
from franchisehub.api.planning import router as planning_router
from franchisehub.api.restaurants import router as restaurants_router
from franchisehub.api.tags import router as tags_router
from franchisehub.api.tenants import router as tenants_router
from franchisehub.api.tickets import router as tickets_router
from franchisehub.api.users import router as users_router
from franchisehub.services.errors import ServiceError
from franchisehub.utils.config import get_settings

# Schema is created from the ORM metadata; see franchisehub.db.database.init_db.

app = FastAPI(
    title="FranchiseHub API",
    description="Multi-tenant franchise management: documents, tickets, announcements, audits and planning.",
    version=__version__,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.info("service_error path=%s status=%s detail=%s", request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity_error path=%s error=%s", request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflict with existing data"})


app.include_router(auth_router)
app.include_router(tenants_router)
app.include_router(users_router)
app.include_router(restaurants_router)
app.include_router(invites_router)
app.include_router(categories_router)
app.include_router(tags_router)
app.include_router(documents_router)
app.include_router(tickets_router)
app.include_router(announcements_router)
app.include_router(notifications_router)
app.include_router(dashboard_router)
app.include_router(audit_templates_router)
app.include_router(audit_executions_router)
app.include_router(non_conformities_router)
app.include_router(corrective_actions_router)
app.include_router(audit_archives_router)
app.include_router(audit_cleanup_router)
app.include_router(planning_router)
app.include_router(activity_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "franchisehub"}
