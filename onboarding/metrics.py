"""Prometheus metrics definitions for the onboarding service.

Exposes metrics for:
1. HTTP API metrics (requests, latency, errors)
2. External client metrics (S3, OpenAI, Resend)
3. Submission pipeline metrics (wizard submits, normalization, cleanup)
4. Background job metrics (runs, duration, errors)
"""
from prometheus_client import Counter, Histogram, Gauge, Info

# =============================================================================
# HTTP API METRICS
# =============================================================================

# Request counter with method, endpoint, and status labels
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

# Request latency histogram
HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Active requests gauge
HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

# Request size histogram (uploads make this much wider than a JSON API)
HTTP_REQUEST_SIZE_BYTES = Histogram(
    "http_request_size_bytes",
    "HTTP request body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 1000, 10000, 100000, 1000000, 5000000, 25000000),
)

# Response size histogram
HTTP_RESPONSE_SIZE_BYTES = Histogram(
    "http_response_size_bytes",
    "HTTP response body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000, 500000),
)

# =============================================================================
# OBJECT STORE (S3) METRICS
# =============================================================================

S3_UPLOADS_TOTAL = Counter(
    "s3_uploads_total",
    "Total number of S3 object uploads",
    ["bucket", "status"],  # status: success, error
)

S3_UPLOAD_DURATION_SECONDS = Histogram(
    "s3_upload_duration_seconds",
    "S3 upload latency in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

S3_UPLOAD_BYTES = Histogram(
    "s3_upload_bytes",
    "Size of uploaded objects in bytes",
    buckets=(10000, 100000, 250000, 500000, 1000000, 2000000, 5000000, 25000000),
)

S3_DELETES_TOTAL = Counter(
    "s3_deletes_total",
    "Total number of S3 object deletions",
    ["status"],  # status: success, error
)

# =============================================================================
# OPENAI CLIENT METRICS
# =============================================================================

OPENAI_API_CALLS_TOTAL = Counter(
    "openai_api_calls_total",
    "Total number of OpenAI API calls",
    ["endpoint", "status"],  # status: success, error
)

OPENAI_API_CALL_DURATION_SECONDS = Histogram(
    "openai_api_call_duration_seconds",
    "OpenAI API call latency in seconds",
    ["endpoint"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0),
)

# =============================================================================
# NOTIFICATION (RESEND) METRICS
# =============================================================================

NOTIFICATION_EMAILS_TOTAL = Counter(
    "notification_emails_total",
    "Submission notification e-mails",
    ["result"],  # result: sent, error, disabled
)

# =============================================================================
# SUBMISSION PIPELINE METRICS
# =============================================================================

IMAGE_NORMALIZATION_RESULTS = Counter(
    "image_normalization_results_total",
    "Results of image normalization",
    ["profile", "result"],  # result: normalized, passthrough, fallback
)

SUBMISSIONS_TOTAL = Counter(
    "submissions_total",
    "Wizard submissions by outcome",
    ["result"],  # result: success, upload_error, write_error
)

SUBMISSION_PERSIST_DURATION_SECONDS = Histogram(
    "submission_persist_duration_seconds",
    "Time spent persisting a completed wizard draft",
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
)

SUBMISSION_FILES_UPLOADED = Counter(
    "submission_files_uploaded_total",
    "Files uploaded while persisting submissions",
    ["category"],  # logos, hero, about, sections, menus, photos, dishes, deals
)

SUBMISSION_EDITS_TOTAL = Counter(
    "submission_edits_total",
    "Admin edit write-backs by outcome",
    ["result"],  # result: success, conflict, error
)

SUBMISSIONS_MARKED_LIVE = Counter(
    "submissions_marked_live_total",
    "Submissions transitioned to live",
)

ORPHAN_UPLOADS_ENQUEUED = Counter(
    "orphan_uploads_enqueued_total",
    "Uploaded objects queued for deletion after a failed submission",
)

ORPHAN_UPLOADS_CLEANED = Counter(
    "orphan_uploads_cleaned_total",
    "Orphan cleanup outcomes",
    ["result"],  # result: deleted, requeued
)

WIZARD_SESSIONS_ACTIVE = Gauge(
    "wizard_sessions_active",
    "Number of in-memory wizard sessions",
)

# =============================================================================
# BACKGROUND JOB METRICS
# =============================================================================

BACKGROUND_JOB_RUNS_TOTAL = Counter(
    "background_job_runs_total",
    "Total number of background job runs",
    ["job_name", "status"],  # status: success, error
)

BACKGROUND_JOB_DURATION_SECONDS = Histogram(
    "background_job_duration_seconds",
    "Background job execution duration in seconds",
    ["job_name"],
    buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0),
)

BACKGROUND_JOB_LAST_RUN_TIMESTAMP = Gauge(
    "background_job_last_run_timestamp",
    "Timestamp of the last successful background job run",
    ["job_name"],
)

# =============================================================================
# APPLICATION INFO
# =============================================================================

APP_INFO = Info(
    "onboarding",
    "Restaurant onboarding service information",
)

# Set application info at module load
APP_INFO.info({
    "version": "1.0.0",
    "description": "Restaurant onboarding intake wizard and admin review",
})
