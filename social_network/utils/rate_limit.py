from slowapi import Limiter
from slowapi.util import get_remote_address
from social_network.config import settings

# Shared by main.py (app.state.limiter) and the routers' @limiter.limit decorators
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
