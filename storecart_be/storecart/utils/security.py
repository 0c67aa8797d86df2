from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from storecart.config import get_settings
from storecart.models.user import User, get_db

logger = logging.getLogger(__name__)

http_bearer = HTTPBearer(auto_error=False)


# ===== JWT helpers =====
def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    jti = uuid.uuid4().hex
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": subject, "exp": expire, "iat": now, "nbf": now, "jti": jti}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def get_current_user_email(token: HTTPAuthorizationCredentials = Depends(http_bearer)) -> str:
    if not token or not token.credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    settings = get_settings()
    try:
        payload = jwt.decode(token.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token payload")
    return email


def get_current_user(
    email: str = Depends(get_current_user_email),
    db: Session = Depends(get_db),
) -> User:
    """The signed-in shopper; cart code only ever uses its id."""
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid user")
    return user


def is_admin_email(email: str) -> bool:
    if not email:
        return False
    return email.strip().lower() in get_settings().admin_emails


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "ADMIN" and not is_admin_email(user.email):
        logger.warning("Non-admin %s attempted an admin catalog action", user.email)
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
