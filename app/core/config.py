from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    environment: str = "development"

    # LLM provider: "openai", "vllm" or "gemini"
    llm_provider: str = "openai"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 120.0

    # vLLM (OpenAI-compatible endpoint)
    vllm_api_url: str = ""
    vllm_api_key: str = ""
    vllm_model: str = ""
    vllm_timeout: float = 180.0

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_timeout: float = 120.0

    # GitHub
    github_token: str = ""
    github_timeout: float = 60.0
    github_max_concurrent_requests: int = 5

    # README fetched from GitHub is capped before it is stored
    readme_max_length_github: int = 8000

    # Commit cache
    commit_fetch_limit: int = 5

    # Project context older than this many days is refreshed
    context_max_age_days: float = 30.0

    # Prompt limits per tier
    quick_max_tokens: int = 1000
    basic_readme_limit: int = 500
    basic_diff_limit: int = 1000
    basic_max_tokens: int = 1500
    enhanced_readme_limit: int = 800
    enhanced_diff_limit: int = 800
    enhanced_max_tokens: int = 2000
    changelog_temperature: float = 0.7
    max_files_per_commit: int = 50

    # Project summary
    summary_structure_limit: int = 20
    summary_max_tokens: int = 500
    summary_temperature: float = 0.7

    # Logging
    log_level: str = "INFO"

    # Langfuse
    langfuse_public_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_base_url: str = "https://cloud.langfuse.com"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate_for_production(self) -> list[str]:
        """Return the names of required settings that are missing"""
        errors = []
        if self.llm_provider == "openai" and not self.openai_api_key:
            errors.append("OPENAI_API_KEY")
        if self.llm_provider == "vllm" and not self.vllm_api_url:
            errors.append("VLLM_API_URL")
        if self.llm_provider == "gemini" and not self.gemini_api_key:
            errors.append("GEMINI_API_KEY")
        if not self.github_token:
            errors.append("GITHUB_TOKEN")
        return errors

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Reject production settings with missing credentials"""
        if self.is_production:
            missing = self.validate_for_production()
            if missing:
                raise ValueError(f"Missing required production settings: {', '.join(missing)}")
        return self


settings = Settings()
