"""
Centralized configuration — all env vars and constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')
DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', '5'))
DB_MAX_OVERFLOW = int(os.getenv('DB_MAX_OVERFLOW', '10'))

# ── Auth ─────────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
INGEST_TOKEN = os.getenv('INGEST_TOKEN')
SUBMITTER_HEADER = 'X-Submitter'

# ── Server ────────────────────────────────────────────────────────────────────
PORT = int(os.getenv('PORT', '8080'))

# ── Measures ──────────────────────────────────────────────────────────────────
# Every new project is seeded with this measure; the console adapter reports into it.
DEFAULT_MEASURE = os.getenv('DEFAULT_MEASURE', 'latency')
DEFAULT_MEASURE_UNITS = os.getenv('DEFAULT_MEASURE_UNITS', 'ns')

# ── Thresholds ────────────────────────────────────────────────────────────────
DEFAULT_MIN_SAMPLE_SIZE = 2

# ── Alert status values ───────────────────────────────────────────────────────
# New alerts start active; only active alerts can be dismissed or resolved.
ALERT_ACTIVE = 'active'
ALERT_DISMISSED = 'dismissed'
ALERT_RESOLVED = 'resolved'
