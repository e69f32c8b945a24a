"""Identity dependency.

Authentication happens upstream at the identity provider; by the time a
request reaches us it carries the authenticated user id in a header, which
we trust as-is once it maps to a known user.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from hangouts.config import settings
from hangouts.database import get_db
from hangouts.errors import Unauthorized
from hangouts.models.user import User


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user_id = request.headers.get(settings.IDENTITY_HEADER)
    if not user_id:
        raise Unauthorized()
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise Unauthorized("Unknown user")
    return user
