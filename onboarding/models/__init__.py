"""Data models package for the onboarding service."""
from onboarding.models.draft import (
    UploadedFile,
    BusinessInfo,
    About,
    CustomSection,
    Dish,
    Deal,
    MenuUpload,
    DeliveryHours,
    Social,
    Fonts,
    Faq,
    Draft,
)
from onboarding.models.submission import (
    Submission,
    SubmissionStatus,
    SubmissionBundle,
    SubmissionSummary,
    DishRow,
    DealRow,
    PhotoRow,
    MenuRow,
    FaqRow,
    ChildDiff,
)
from onboarding.models.editing import (
    EditableSubmission,
    EditableDish,
    EditableDeal,
)
from onboarding.models.export import ExportDocument, EXPORT_VERSION
from onboarding.models.caption import (
    CaptionSuggestion,
    BatchPhotoItem,
    BatchPhotoResult,
)

__all__ = [
    # Draft models
    "UploadedFile",
    "BusinessInfo",
    "About",
    "CustomSection",
    "Dish",
    "Deal",
    "MenuUpload",
    "DeliveryHours",
    "Social",
    "Fonts",
    "Faq",
    "Draft",
    # Persisted models
    "Submission",
    "SubmissionStatus",
    "SubmissionBundle",
    "SubmissionSummary",
    "DishRow",
    "DealRow",
    "PhotoRow",
    "MenuRow",
    "FaqRow",
    "ChildDiff",
    # Admin editing
    "EditableSubmission",
    "EditableDish",
    "EditableDeal",
    # Export
    "ExportDocument",
    "EXPORT_VERSION",
    # Captioning / batch tool
    "CaptionSuggestion",
    "BatchPhotoItem",
    "BatchPhotoResult",
]
