# utils/middleware.py

import logging
from utils.context import set_request_context, clear_request_context, get_client_ip

logger = logging.getLogger(__name__)


class AuditContextMiddleware:
    """
    Attributes every write made while serving a request to the logged-in
    user and client IP (see BaseModel.save and FinancialAuditLog).

    Listed after AuthenticationMiddleware in settings.MIDDLEWARE.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        user = getattr(request, 'user', None)
        ip_address = get_client_ip(request)

        set_request_context(
            user=user,
            ip_address=ip_address,
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
            request_path=request.path,
        )
        try:
            return self.get_response(request)
        finally:
            clear_request_context()
