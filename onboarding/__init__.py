"""Restaurant onboarding intake service."""
