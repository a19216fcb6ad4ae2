"""
Redis-based rate limiting for API endpoints.
Implements a fixed window counter per client IP and endpoint.

The Redis client is created on first use; when Redis is unreachable the
limiter fails open and requests are served without limits.
"""
import logging
from functools import wraps
from typing import Optional, Tuple

import redis
from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)

_redis_client = None
_redis_unavailable = False


def get_redis_client() -> Optional[redis.Redis]:
    """Return a shared Redis client, or None if Redis cannot be reached."""
    global _redis_client, _redis_unavailable

    if _redis_client is not None or _redis_unavailable:
        return _redis_client

    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning(f"Redis connection failed: {e}. Rate limiting will be disabled.")
        _redis_unavailable = True
        return None

    _redis_client = client
    return _redis_client


def get_client_ip(request):
    """Extract client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR', 'unknown')
    return ip


def _limiter_active() -> bool:
    return getattr(settings, 'RATE_LIMIT_ENABLED', True)


def _hit(key: str, window_seconds: int) -> Optional[Tuple[int, int]]:
    """
    Count one request against ``key``.

    Returns (current_count, ttl) or None when the limiter is unavailable.
    """
    client = get_redis_client()
    if client is None:
        return None

    try:
        current_count = client.incr(key)
        if current_count == 1:
            client.expire(key, window_seconds)
        return current_count, client.ttl(key)
    except redis.RedisError as e:
        logger.error(f"Redis error in rate limiting: {e}")
        return None


def _limit_exceeded_response(max_requests: int, window_seconds: int, ttl: int) -> Response:
    return Response(
        {
            'error': 'Rate limit exceeded',
            'detail': f'Maximum {max_requests} requests per {window_seconds} seconds allowed.',
            'retry_after': ttl
        },
        status=status.HTTP_429_TOO_MANY_REQUESTS,
        headers={
            'X-RateLimit-Limit': str(max_requests),
            'X-RateLimit-Remaining': '0',
            'X-RateLimit-Reset': str(ttl),
            'Retry-After': str(ttl)
        }
    )


def _annotate(response, max_requests: int, current_count: int, ttl: int):
    response['X-RateLimit-Limit'] = str(max_requests)
    response['X-RateLimit-Remaining'] = str(max(0, max_requests - current_count))
    response['X-RateLimit-Reset'] = str(ttl)
    return response


def rate_limit(max_requests: int = 20, window_seconds: int = 60):
    """
    Rate limiting decorator for DRF view methods.

    Usage:
        @rate_limit(20, 60)  # 20 requests per minute
        def get(self, request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            if not _limiter_active():
                return view_func(self, request, *args, **kwargs)

            key = f"rate_limit:{view_func.__qualname__}:{get_client_ip(request)}"
            hit = _hit(key, window_seconds)
            if hit is None:
                return view_func(self, request, *args, **kwargs)

            current_count, ttl = hit
            if current_count > max_requests:
                return _limit_exceeded_response(max_requests, window_seconds, ttl)

            response = view_func(self, request, *args, **kwargs)
            return _annotate(response, max_requests, current_count, ttl)

        return wrapper
    return decorator


class RateLimitMixin:
    """
    Mixin class for class-based views to add rate limiting.

    Usage:
        class ProductSearchView(RateLimitMixin, generics.ListAPIView):
            rate_limit_max_requests = 60
            rate_limit_window_seconds = 60
    """
    rate_limit_max_requests = 20
    rate_limit_window_seconds = 60

    def dispatch(self, request, *args, **kwargs):
        if not _limiter_active():
            return super().dispatch(request, *args, **kwargs)

        key = f"rate_limit:{self.__class__.__name__}:{get_client_ip(request)}"
        hit = _hit(key, self.rate_limit_window_seconds)
        if hit is None:
            return super().dispatch(request, *args, **kwargs)

        current_count, ttl = hit
        if current_count > self.rate_limit_max_requests:
            response = _limit_exceeded_response(
                self.rate_limit_max_requests, self.rate_limit_window_seconds, ttl
            )
            # Early return skips APIView.dispatch, so negotiate a renderer here
            self.request = self.initialize_request(request, *args, **kwargs)
            self.headers = self.default_response_headers
            return self.finalize_response(self.request, response, *args, **kwargs)

        response = super().dispatch(request, *args, **kwargs)
        return _annotate(response, self.rate_limit_max_requests, current_count, ttl)

