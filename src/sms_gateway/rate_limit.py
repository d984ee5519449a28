from __future__ import annotations

from typing import Final

from slowapi import Limiter
from slowapi.util import get_remote_address

# At most 10 sends per client address in any rolling 15 minutes.
SEND_SMS_RATE_LIMIT: Final[str] = "10/15 minutes"

RATE_LIMIT_MESSAGE: Final[str] = "Too many SMS requests, please try again later."

# In-process memory storage: counters are per worker and reset on restart.
limiter = Limiter(
    key_func=get_remote_address,
    strategy="moving-window",
)
