"""Tests for metrics endpoint normalization."""
from fastapi import FastAPI

from onboarding.middleware import PrometheusMiddleware


class TestNormalizeEndpoint:
    def setup_method(self):
        self.middleware = PrometheusMiddleware(FastAPI())

    def test_submission_ids_collapse(self):
        path = "/v1/admin/submissions/3f2b8c1e-5d4a-4e7b-9c0f-1a2b3c4d5e6f/export"
        assert self.middleware._normalize_endpoint(path) == "/v1/admin/submissions/{id}/export"

    def test_session_ids_and_step_indexes_collapse(self):
        path = "/v1/wizard/sessions/3f2b8c1e5d4a4e7b9c0f1a2b3c4d5e6f/goto/3"
        assert self.middleware._normalize_endpoint(path) == "/v1/wizard/sessions/{id}/goto/{n}"

    def test_named_segments_kept(self):
        assert self.middleware._normalize_endpoint("/v1/wizard/sessions/abc/goto/photos") == (
            "/v1/wizard/sessions/abc/goto/photos"
        )
        assert self.middleware._normalize_endpoint("/") == "/"
