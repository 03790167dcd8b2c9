import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()

class ScoreWeights(BaseModel):
    """Default weighting of the three score slots, in percent."""
    results_weight: int = Field(default=int(os.getenv("WEIGHT_RESULTS", "30")))
    process_weight: int = Field(default=int(os.getenv("WEIGHT_PROCESS", "40")))
    growth_weight: int = Field(default=int(os.getenv("WEIGHT_GROWTH", "30")))

class Config(BaseModel):
    app_name: str = "Evaluation Orchestration Engine"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./evaluation.db")

    # Auth (tokens are issued by the identity service, we only verify them)
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    # Generation
    generation_chunk_size: int = int(os.getenv("GENERATION_CHUNK_SIZE", "500"))
    max_hierarchy_depth: int = 3
    rate_limit_generate: str = os.getenv("RATE_LIMIT_GENERATE", "10/minute")
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # Scoring
    weights: ScoreWeights = ScoreWeights()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
