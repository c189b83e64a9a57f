from enum import Enum


class ErrorCode(str, Enum):
    """Error codes surfaced to callers"""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    GITHUB_API_ERROR = "GITHUB_API_ERROR"
    LLM_ERROR = "LLM_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    CONTEXT_STATE_ERROR = "CONTEXT_STATE_ERROR"
    CONTEXT_REFRESH_FAILED = "CONTEXT_REFRESH_FAILED"


class CustomException(Exception):
    def __init__(
        self,
        error_code: ErrorCode | str,
        message: str,
        detail: str | None = None,
    ):
        self.error_code = error_code
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_dict(self, include_detail: bool = True) -> dict:
        """Single error payload for callers"""
        content = {
            "error_code": self.error_code,
            "message": self.message,
        }
        if include_detail and self.detail:
            content["detail"] = self.detail
        return content


class ConfigurationError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            error_code=ErrorCode.CONFIGURATION_ERROR,
            message=detail or "Service is not configured",
            detail=detail,
        )


class GitHubAPIError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            error_code=ErrorCode.GITHUB_API_ERROR,
            message="GitHub API request failed",
            detail=detail,
        )


class LLMError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            error_code=ErrorCode.LLM_ERROR,
            message="LLM completion failed",
            detail=detail,
        )


class ValidationError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            error_code=ErrorCode.INVALID_INPUT,
            message="Invalid input",
            detail=detail,
        )


class ProjectNotFoundError(CustomException):
    def __init__(self, project_id: str):
        super().__init__(
            error_code=ErrorCode.PROJECT_NOT_FOUND,
            message="Project not found",
            detail=f"project_id={project_id}",
        )


class ContextStateError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            error_code=ErrorCode.CONTEXT_STATE_ERROR,
            message="Invalid project context status transition",
            detail=detail,
        )


class ContextRefreshError(CustomException):
    def __init__(self, detail: str | None = None):
        super().__init__(
            error_code=ErrorCode.CONTEXT_REFRESH_FAILED,
            message="Project context refresh failed",
            detail=detail,
        )
