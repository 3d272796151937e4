"""Data access package."""
from onboarding.dao.redis_submission_dao import (
    RedisSubmissionDAO,
    SubmissionNotFoundError,
    SubmissionConflictError,
)

__all__ = ["RedisSubmissionDAO", "SubmissionNotFoundError", "SubmissionConflictError"]
