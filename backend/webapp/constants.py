"""Application-wide constants."""

# Image uploads
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif")

IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
}

# Headers sent on every /healthz response
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "X-Content-Type-Options": "nosniff",
}


class VerificationState:
    """Email verification states of a user."""
    UNVERIFIED_NO_TOKEN = "unverified_no_token"
    UNVERIFIED_PENDING_TOKEN = "unverified_pending_token"
    VERIFIED = "verified"
