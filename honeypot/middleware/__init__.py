from .request_log import RequestLogMiddleware, build_request_entry

__all__ = ["RequestLogMiddleware", "build_request_entry"]
