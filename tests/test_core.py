"""Config, context, logging and exception tests"""

import io
import json
import logging

import pytest

from app.core.config import Settings
from app.core.context import bind_project, bind_request, get_project_id, get_request_id
from app.core.exceptions import (
    ContextRefreshError,
    ErrorCode,
    LLMError,
    ProjectNotFoundError,
)
from app.core.logging import (
    HANDLER_NAME,
    build_processors,
    inject_context,
    mask_processor,
    mask_secrets,
    setup_logging,
)


class TestSettings:
    """Settings tests"""

    def test_defaults(self):
        config = Settings(_env_file=None)
        assert config.commit_fetch_limit == 5
        assert config.context_max_age_days == 30
        assert config.enhanced_diff_limit == 800

    def test_production_missing_credentials(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            Settings(_env_file=None, environment="production", openai_api_key="", github_token="t")

    def test_production_complete(self):
        config = Settings(
            _env_file=None,
            environment="production",
            openai_api_key="sk-test",
            github_token="ghp_test",
        )
        assert config.is_production is True


class TestContext:
    """Context variable tests"""

    def test_bind_project_resets(self):
        with bind_project("p1"):
            assert get_project_id() == "p1"
        assert get_project_id() is None

    def test_bind_request_generates_id(self):
        with bind_request() as request_id:
            assert len(request_id) == 8
            assert get_request_id() == request_id
        assert get_request_id() is None

    def test_bind_request_nested_keeps_outer(self):
        with bind_request("outer123"):
            with bind_request() as inner:
                assert inner == "outer123"
            with bind_request("explicit") as explicit:
                assert get_request_id() == explicit == "explicit"
            assert get_request_id() == "outer123"


class TestLogging:
    """Logging processor and setup tests"""

    def test_context_injected(self):
        with bind_request("req00001"), bind_project("p1"):
            event = inject_context(None, "info", {"event": "x"})
        assert event["project_id"] == "p1"
        assert event["request_id"] == "req00001"

    def test_context_not_overridden(self):
        with bind_project("p1"):
            event = inject_context(None, "info", {"event": "x", "project_id": "p2"})
        assert event["project_id"] == "p2"
        assert "request_id" not in event

    @pytest.mark.parametrize(
        "raw,masked",
        [
            ("token=abc123", "token=***"),
            ("Authorization: Bearer ghp_secret", "Authorization: Bearer ***"),
            ("key sk-abcdefghijkl", "key sk-***"),
            ("using ghp_abcdefghijklmnop", "using ghp_***"),
        ],
    )
    def test_mask(self, raw, masked):
        assert mask_secrets(raw) == masked

    def test_mask_processor_lists(self):
        event = mask_processor(None, "info", {"event": "x", "args": ["token=abc", 3]})
        assert event["args"] == ["token=***", 3]

    def test_masking_only_for_json(self):
        assert mask_processor in build_processors(json_output=True)
        assert mask_processor not in build_processors(json_output=False)

    def test_setup_replaces_own_handler(self):
        """Repeated setup keeps one handler of ours and leaves others alone"""
        root = logging.getLogger()
        foreign = logging.NullHandler()
        root.addHandler(foreign)
        try:
            setup_logging("DEBUG", json_output=True, stream=io.StringIO())
            setup_logging("INFO", json_output=False, stream=io.StringIO())

            ours = [h for h in root.handlers if h.get_name() == HANDLER_NAME]
            assert len(ours) == 1
            assert foreign in root.handlers
            assert root.level == logging.INFO
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.removeHandler(foreign)

    def test_json_output_masks_foreign_records(self):
        """stdlib records are rendered as JSON with context and masked arguments"""
        stream = io.StringIO()
        setup_logging("INFO", json_output=True, stream=stream)
        try:
            with bind_project("p1"):
                logging.getLogger("app.test").info("calling url=%s", "https://x?token=abc")

            line = json.loads(stream.getvalue().strip().splitlines()[-1])
            assert line["event"] == "calling url=https://x?token=***"
            assert line["project_id"] == "p1"
            assert line["level"] == "info"
        finally:
            setup_logging(json_output=False)


class TestExceptions:
    """Error type tests"""

    def test_to_dict(self):
        error = LLMError(detail="timeout")
        assert error.to_dict() == {
            "error_code": ErrorCode.LLM_ERROR,
            "message": "LLM completion failed",
            "detail": "timeout",
        }
        assert "detail" not in error.to_dict(include_detail=False)

    def test_project_not_found(self):
        error = ProjectNotFoundError("p1")
        assert error.error_code == ErrorCode.PROJECT_NOT_FOUND
        assert error.detail == "project_id=p1"

    def test_refresh_error_code(self):
        assert ContextRefreshError().error_code == ErrorCode.CONTEXT_REFRESH_FAILED
