from slowapi import Limiter
from slowapi.util import get_remote_address

from resume_tailor.core.config import settings

# Shared limiter; routes opt into stricter limits with @limiter.limit(...)
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.environment != "testing",
)
