from dataclasses import dataclass, field
import os

from dotenv import load_dotenv

load_dotenv(override=False)


def _parse_spans(raw):
    return tuple(float(s) for s in raw.split(",") if s.strip())


@dataclass
class Settings:
    environment: str = os.getenv("ENVIRONMENT", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    spans: tuple = field(default_factory=lambda: _parse_spans(os.getenv("LOESS_SPANS", "0.1,0.25,0.5")))
    n_jobs: int = int(os.getenv("LOESS_N_JOBS", "1"))
    singular_rtol: float = float(os.getenv("LOESS_SINGULAR_RTOL", "1e-12"))

    x_column: str = os.getenv("X_COLUMN", "year")
    y_column: str = os.getenv("Y_COLUMN", "ring_width")


settings = Settings()

__all__ = ["Settings", "settings"]
