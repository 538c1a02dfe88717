"""
errors.py – DanceUp exception taxonomy
────────────────────────────────────────────
Every failure a dashboard action can hit maps onto one of these.
Blueprints turn them into {"ok": False, "error": ...} replies using
the attached HTTP status.
────────────────────────────────────────────
"""


class DanceUpError(Exception):
    """Base class for all dashboard errors."""
    status = 500


class ValidationError(DanceUpError):
    """Form input rejected before any store call (required fields, bad numbers, bad image)."""
    status = 400


class AuthError(DanceUpError):
    """Bad credentials, password policy violation, or missing/expired session."""
    status = 401


class NotFoundError(DanceUpError):
    """Document does not exist or belongs to another owner."""
    status = 404


class StoreError(DanceUpError):
    """Document or blob store write failed."""
    status = 502
