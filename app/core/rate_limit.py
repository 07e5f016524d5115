from slowapi import Limiter
from slowapi.util import get_remote_address
from app.core.config import settings

# Shared by app.state and the route decorators so limits and headers agree
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
