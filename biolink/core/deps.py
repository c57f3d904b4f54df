"""Dépendances FastAPI partagées entre les routers"""

from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from biolink.core.config import settings
from biolink.core.database import get_db
from biolink.core.security import decode_token
from biolink.models.user import User


def get_current_user(db: Session = Depends(get_db), authorization: Optional[str] = Header(None)) -> User:
    """
    Récupère l'utilisateur depuis le JWT token.

    Extrait le token du header Authorization, le valide, et retourne l'user.
    """
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    token = authorization.replace("Bearer ", "")
    user_id = decode_token(token)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    # liste blanche d'emails (ADMIN_EMAILS)
    if current_user.email.lower() not in settings.ADMIN_EMAILS:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin only")
    return current_user
