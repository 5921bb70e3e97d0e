import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from veo_analyzer.core.logger import get_logger, get_request_ip, reset_request_ip, set_request_ip


def _client_ip(request: Request) -> str:
    # X-Forwarded-For first when running behind a reverse proxy
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else "-"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        token = set_request_ip(_client_ip(request))
        app_logger = get_logger()

        start = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            app_logger.exception(f"{get_request_ip()} - ERROR {request.method} {request.url.path}: {e}")
            raise
        else:
            dur = int((time.time() - start) * 1000)
            app_logger.info(f"{get_request_ip()} - {request.method} {request.url.path} {response.status_code} {dur}ms")
            return response
        finally:
            reset_request_ip(token)
