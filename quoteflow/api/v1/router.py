from fastapi import APIRouter

from quoteflow.api.v1.health import router as health_router
from quoteflow.api.v1.auth import router as auth_router
from quoteflow.api.v1.audit import router as audit_router

from quoteflow.api.v1.quotations import router as quotations_router
from quoteflow.api.v1.projects import router as projects_router
from quoteflow.api.v1.invoices import router as invoices_router
from quoteflow.api.v1.dashboard import router as dashboard_router
from quoteflow.api.v1.webhooks import router as webhooks_router


v1_router = APIRouter()

# ------------------------------------------------------------------
# SYSTEM / CORE
# ------------------------------------------------------------------
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(auth_router, tags=["auth"])
v1_router.include_router(audit_router, tags=["audit"])

# ------------------------------------------------------------------
# QUOTATION -> PROJECT -> INVOICE
# ------------------------------------------------------------------
v1_router.include_router(quotations_router, tags=["quotations"])
v1_router.include_router(projects_router, tags=["projects"])
v1_router.include_router(invoices_router, tags=["invoices"])

# ------------------------------------------------------------------
# ADMIN / INTEGRATIONS
# ------------------------------------------------------------------
v1_router.include_router(dashboard_router, tags=["dashboard"])
v1_router.include_router(webhooks_router, tags=["webhooks"])
