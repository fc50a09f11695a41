from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ratemystore.auth.permissions import Principal
from ratemystore.db.session import get_db
from ratemystore.repository import user as user_repository


def get_principal(request: Request, db: Session = Depends(get_db)) -> Optional[Principal]:
    """Resolve the request's principal, or None when unauthenticated.

    The role is read from the current user row, not from the token, so a
    role change takes effect on the next request.
    """
    state_user = getattr(request.state, "user", None)
    if not state_user or not state_user.get("id"):
        return None

    user = user_repository.get_user_by_id(db, state_user["id"])
    if user is None:
        return None
    return Principal.from_user(user)
