from pathlib import Path

from ..config import settings


def get_uploads_dir() -> Path:
    return Path(settings.UPLOADS_DIR).resolve()


def image_url(path: str) -> str:
    """Public URL of an answer image stored under the uploads dir."""
    if not path:
        return ""
    if path.startswith(("http://", "https://")):
        return path
    base = settings.app.public_host.rstrip("/")
    return f"{base}/uploads/{path.lstrip('/')}"
