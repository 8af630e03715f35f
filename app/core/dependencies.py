from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session
from typing import Optional

from app.db.session import get_db
from app.crud import crud_user
from app.core.context import AppContext
from app.core.errors import AuthenticationError, AuthorizationError
from app.core.principal import Principal
from app.core.security import decode_access_token
from app.schemas.token import TokenData
from app.models.user import User

# Tokens are issued by the identity layer; the URL only documents the flow in OpenAPI
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

def get_context(request: Request) -> AppContext:
    return request.app.state.context

async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db) # token can be None
) -> Optional[User]:
    if token is None: # No token means anonymous, endpoints decide whether that is allowed
        return None

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        token_data = TokenData(user_id=int(subject))
    except (JWTError, ValueError): # Bad signature, expired, or a non-numeric subject
        raise credentials_exception

    user = crud_user.get_user(db, token_data.user_id)
    if user is None:
        # A valid token for a user that no longer exists
        raise credentials_exception
    return user

async def get_current_principal(
    current_user: Optional[User] = Depends(get_current_user),
) -> Optional[Principal]:
    if current_user is None or not current_user.is_active:
        return None
    return Principal.from_user(current_user)

async def get_current_active_principal(
    current_user: Optional[User] = Depends(get_current_user),
) -> Principal:
    if not current_user:
        raise AuthenticationError()
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return Principal.from_user(current_user)

async def get_current_admin(
    principal: Principal = Depends(get_current_active_principal),
) -> Principal:
    if not principal.is_admin:
        raise AuthorizationError("The user doesn't have enough privileges")
    return principal
