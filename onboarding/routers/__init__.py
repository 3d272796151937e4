"""Routers package."""
from onboarding.routers.wizard_router import router as wizard_router, set_wizard_handler
from onboarding.routers.admin_router import router as admin_router, set_submission_handler
from onboarding.routers.tools_router import router as tools_router, set_tools_handler

__all__ = [
    "wizard_router",
    "set_wizard_handler",
    "admin_router",
    "set_submission_handler",
    "tools_router",
    "set_tools_handler",
]
