# imagifine/core/config.py
import json
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional

from dotenv import load_dotenv

# ================== ENV ==================

ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(ROOT_DIR / ".env")


def env(*names: str, default: Optional[str] = None) -> str:
    for n in names:
        v = os.environ.get(n)
        if v is not None and str(v).strip() != "":
            return v
    if default is not None:
        return default
    raise KeyError(f"Missing required env var. Tried: {', '.join(names)}")


def _env_list(name: str) -> List[str]:
    raw = os.environ.get(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


# ================== JWT ==================

JWT_SECRET = env("JWT_SECRET", "SECRET_KEY", default="default_secret_key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = int(os.environ.get("JWT_EXPIRATION_HOURS", "24"))

# ================== DATABASE ==================

DATABASE_URL = os.environ.get("DATABASE_URL", "")


def get_database_url() -> str:
    """Get database URL - supports SQLite or MySQL."""
    if DATABASE_URL:
        return DATABASE_URL

    mysql_host = os.environ.get("MYSQL_HOST")
    if mysql_host:
        mysql_port = int(os.environ.get("MYSQL_PORT", "3306"))
        mysql_user = os.environ.get("MYSQL_USER", "root")
        mysql_password = os.environ.get("MYSQL_PASSWORD", "")
        mysql_db = os.environ.get("MYSQL_DB", "imagifine")
        return f"mysql+aiomysql://{mysql_user}:{mysql_password}@{mysql_host}:{mysql_port}/{mysql_db}?charset=utf8mb4"

    db_path = ROOT_DIR / "imagifine.db"
    return f"sqlite+aiosqlite:///{db_path}"


# ================== PAYMENTS ==================

RAZORPAY_KEY_ID = os.environ.get("RAZORPAY_KEY_ID", "").strip()
RAZORPAY_KEY_SECRET = os.environ.get("RAZORPAY_KEY_SECRET", "").strip()
RAZORPAY_WEBHOOK_SECRET = os.environ.get("RAZORPAY_WEBHOOK_SECRET", "").strip()
RAZORPAY_API_BASE = os.environ.get("RAZORPAY_API_BASE", "https://api.razorpay.com/v1").rstrip("/")
PAYMENT_CURRENCY = os.environ.get("PAYMENT_CURRENCY", "INR")
GATEWAY_TIMEOUT_SECONDS = float(os.environ.get("GATEWAY_TIMEOUT_SECONDS", "15"))


@dataclass(frozen=True)
class CreditPlan:
    plan_id: str
    amount: int  # smallest currency unit (paise)
    credits: int


_DEFAULT_PLANS = (
    CreditPlan(plan_id="basic", amount=200, credits=2),
    CreditPlan(plan_id="advanced", amount=500, credits=5),
    CreditPlan(plan_id="business", amount=1000, credits=10),
)


def load_credit_plans(raw: Optional[str] = None) -> Mapping[str, CreditPlan]:
    """
    Build the plan table once. CREDIT_PLANS_JSON may override it with
    {"basic": {"amount": 200, "credits": 2}, ...}.
    """
    raw = raw if raw is not None else os.environ.get("CREDIT_PLANS_JSON", "")
    if not raw.strip():
        plans = {p.plan_id: p for p in _DEFAULT_PLANS}
        return MappingProxyType(plans)

    data = json.loads(raw)
    plans = {}
    for plan_id, entry in data.items():
        amount = int(entry["amount"])
        credits = int(entry["credits"])
        if amount <= 0 or credits <= 0:
            raise ValueError(f"Plan {plan_id!r} must have a positive amount and credit quantity")
        plans[plan_id] = CreditPlan(plan_id=plan_id, amount=amount, credits=credits)
    return MappingProxyType(plans)


CREDIT_PLANS = load_credit_plans()

# ================== ACCOUNTS ==================

DEFAULT_CREDITS = int(os.environ.get("DEFAULT_CREDITS", "10"))
MAX_CREDIT_BALANCE = int(os.environ.get("MAX_CREDIT_BALANCE", "1000000"))
ADMIN_EMAILS = {e.lower() for e in _env_list("ADMIN_EMAILS")}

OTP_LENGTH = int(os.environ.get("OTP_LENGTH", "6"))
OTP_TTL_MINUTES = int(os.environ.get("OTP_TTL_MINUTES", "10"))
OTP_RESEND_COOLDOWN_SECONDS = int(os.environ.get("OTP_RESEND_COOLDOWN_SECONDS", "30"))

# ================== MAIL ==================

SMTP_HOST = os.environ.get("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_USER = env("SMTP_USER", "EMAIL_USER", default="")
SMTP_PASSWORD = env("SMTP_PASSWORD", "EMAIL_PASSWORD", default="")
SMTP_TIMEOUT_SECONDS = float(os.environ.get("SMTP_TIMEOUT_SECONDS", "10"))
MAIL_FROM = os.environ.get("MAIL_FROM", SMTP_USER or "no-reply@imagifine.app")
MAIL_FROM_NAME = os.environ.get("MAIL_FROM_NAME", "Team Imagifine")
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "")

# ================== HTTP ==================

CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")

# ================== LOGGING ==================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.environ.get("LOG_DIR", "logs")
