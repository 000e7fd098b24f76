import os
from typing import Optional

from game_logic import MatchSession

# ===============================
# Server settings (from environment)
# ===============================
HOST: str = os.environ.get("HOST", "0.0.0.0")
PORT: int = int(os.environ.get("PORT", "8000"))
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "info").lower()

# ===============================
# Match defaults (overridable per request)
# ===============================
DEFAULT_VARIANT: str = os.environ.get("DEFAULT_VARIANT", "standard")
DEFAULT_TOTAL_LEGS: int = int(os.environ.get("DEFAULT_TOTAL_LEGS", "3"))

# ===============================
# Match state (one active match per process)
# ===============================
current_session: Optional[MatchSession] = None
