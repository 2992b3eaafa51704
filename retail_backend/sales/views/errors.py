# sales/views/errors.py

from rest_framework.response import Response


# ======================================================
# API ERROR NORMALIZATION
# ======================================================

def error_response(*, code: str, message: str, http_status: int, **extra):
    """
    Canonical API error response.
    """
    body = {"code": code, "message": message}
    body.update(extra)
    return Response({"error": body}, status=http_status)
