"""Payments module: proof-of-payment submission, review and export."""

from fastapi import APIRouter


router = APIRouter(prefix="/payments", tags=["payments"])

# Import routes to register them (must be after router is defined)
from payaudit.modules.payments import routes  # noqa: F401, E402
