"""HTTP handlers package."""
from onboarding.handlers.wizard_handler import WizardHandler
from onboarding.handlers.submission_handler import SubmissionHandler
from onboarding.handlers.tools_handler import ToolsHandler, CaptionDisabledError

__all__ = ["WizardHandler", "SubmissionHandler", "ToolsHandler", "CaptionDisabledError"]
