"""HTTP middleware: timeout, request size limit, request ID, correlation ID, security headers.

Applied in main app; order matters (last added = outermost).
"""

from workhub.middleware.correlation_id import CorrelationIDMiddleware
from workhub.middleware.request_id import RequestIDMiddleware
from workhub.middleware.request_size_limit import RequestSizeLimitMiddleware
from workhub.middleware.security_headers import SecurityHeadersMiddleware
from workhub.middleware.timeout import TimeoutMiddleware

__all__ = [
    "CorrelationIDMiddleware",
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
    "TimeoutMiddleware",
]
