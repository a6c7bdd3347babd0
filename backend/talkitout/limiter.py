# talkitout/limiter.py
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from .constants import GENERAL_RATE_LIMIT


def user_or_ip(request: Request) -> str:
    # auth dependency stores the user id before the endpoint runs
    user_id = getattr(request.state, "user_id", None)
    return f"user:{user_id}" if user_id is not None else get_remote_address(request)


limiter = Limiter(key_func=get_remote_address, default_limits=[GENERAL_RATE_LIMIT])
