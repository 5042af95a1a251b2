"""
Core constants — **Single Source of Truth** for project-wide magic values.

Any business rule that references one of these values should import it
from here instead of hardcoding.  This avoids drift between apps that
use the same value.
"""

# ── Case numbering ──────────────────────────────────────────────────
# Case numbers look like ``CT-2024-482913``: prefix, calendar year of
# creation, six random digits.
CASE_NUMBER_PREFIX: str = "CT"
CASE_NUMBER_MIN_SUFFIX: int = 100_000
CASE_NUMBER_MAX_SUFFIX: int = 999_999

# Give up after this many colliding draws and report a conflict.
CASE_NUMBER_MAX_ATTEMPTS: int = 20

# ── Stations / reports ──────────────────────────────────────────────
SERVICE_NAME: str = "SOUTH AFRICAN POLICE SERVICE"
STATION_SUFFIX: str = "Central SAPS"

# ── Accounts ────────────────────────────────────────────────────────
# Synthesised e-mail domain for users who register without an address.
DEFAULT_EMAIL_DOMAIN: str = "casetrack.saps.gov.za"

# ── Dashboard cache ─────────────────────────────────────────────────
DASHBOARD_CACHE_KEY_PREFIX: str = "casetrack:dashboard"
DASHBOARD_CACHE_TTL_SECONDS: int = 60

# ── Reference data ──────────────────────────────────────────────────
PROVINCES: tuple[str, ...] = (
    "Eastern Cape",
    "Free State",
    "Gauteng",
    "KwaZulu-Natal",
    "Limpopo",
    "Mpumalanga",
    "North West",
    "Northern Cape",
    "Western Cape",
)
