from __future__ import annotations

import os

# Runtime knobs; read once at import like the rest of the service.

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./quiz.db")

# Render sometimes hands out postgres://; normalize to postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# Force psycopg3 driver if using Postgres
if DATABASE_URL.startswith("postgresql://") and "+psycopg" not in DATABASE_URL:
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+psycopg://", 1)

# "memory" (default) or "database"
QUIZ_STORAGE = os.getenv("QUIZ_STORAGE", "memory").strip().lower()

TOTAL_QUESTIONS = int(os.getenv("QUIZ_TOTAL_QUESTIONS", "50"))
TIME_LIMIT_S = int(os.getenv("QUIZ_TIME_LIMIT_S", "7200"))  # 120 minutes

# Primary model first; one retry on the next name, then fallback bank.
GEMINI_MODELS = [
    m.strip()
    for m in os.getenv("GEMINI_MODELS", "gemini-2.5-flash,gemini-2.0-flash").split(",")
    if m.strip()
]
GEMINI_TIMEOUT_S = float(os.getenv("GEMINI_TIMEOUT_S", "30"))

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"
    ).split(",")
    if o.strip()
]

FALLBACK_BANK_PATH = os.getenv("FALLBACK_BANK_PATH", "")
