from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health():
    """Liveness probe."""
    return {"message": "Server is running!", "timestamp": datetime.now(timezone.utc).isoformat()}
