"""Application configuration and settings management."""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BackendName = Literal["gemini", "ollama", "huggingface"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SMARTBIN_", extra="ignore")

    app_name: str = Field(default="SmartBin API", description="Human readable application name.")
    environment: Literal["local", "development", "staging", "production"] = Field(
        default="local",
        description="Deployment environment name.",
    )
    classifier_backends: List[BackendName] = Field(
        default_factory=lambda: ["gemini"],
        description="Classifier backends tried in order; the next one is used when a model is not found.",
    )
    gemini_api_key: Optional[str] = Field(default=None, description="API key for the Gemini REST API.")
    gemini_model: str = Field(default="gemini-2.5-flash", description="Gemini model used for image advice.")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL for the Gemini REST API.",
    )
    ollama_base_url: str = Field(
        default="http://ollama:11434",
        description="Base URL for the Ollama service.",
    )
    ollama_model: str = Field(default="llava", description="Vision-capable Ollama model.")
    huggingface_api_token: Optional[str] = Field(
        default=None,
        description="Token for the hosted Hugging Face inference API.",
    )
    huggingface_base_url: str = Field(
        default="https://api-inference.huggingface.co",
        description="Base URL for the hosted Hugging Face inference API.",
    )
    huggingface_models: List[str] = Field(
        default_factory=lambda: [
            "yangy50/garbage-classification",
            "google/vit-base-patch16-224",
        ],
        description="Image classification models tried in order.",
    )
    request_timeout: float = Field(default=120.0, description="Timeout in seconds for classifier calls.")
    history_path: str = Field(default="data/history.jsonl", description="JSON Lines file with past scans.")
    max_upload_bytes: int = Field(default=12 * 1024 * 1024, description="Largest accepted image upload.")
    classify_prompt: str = Field(
        default=(
            "Identify this trash (brief): what is it? Also explain:\n"
            "1) How to safely dispose it\n"
            "2) How to recycle it (step-by-step, short)"
        ),
        description="Prompt sent together with the image to vision-language backends.",
    )
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins.")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
