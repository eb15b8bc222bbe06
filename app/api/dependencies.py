from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.models.learner import LearnerSnapshot
from app.models.principal import Principal
from app.repos.learner_repo import (
    InMemoryLearnerRepo,
    LearnerRepo,
    require_snapshot,
)
from app.services import token_service

logger = logging.getLogger(__name__)

# Tokens are issued by the platform's identity service; tokenUrl only
# feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# Process-wide snapshot store. Swap via app.dependency_overrides[get_learner_repo].
learner_repo = InMemoryLearnerRepo()


def get_learner_repo() -> LearnerRepo:
    return learner_repo


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug(
        "Token validated for user=%s roles=%s",
        principal.user_id,
        principal.roles,
    )
    return principal


def require_role(role: str):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role("admin"))
    Returns the Principal if the role is present, else 403.
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s",
                principal.user_id,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


def require_learner_snapshot(
    principal: Annotated[Principal, Depends(require_user)],
    repo: Annotated[LearnerRepo, Depends(get_learner_repo)],
) -> LearnerSnapshot:
    """Resolve the caller to their populated learner snapshot.

    Raises LearnerNotFoundError, rendered as 404 by learner_not_found_handler.
    """
    return require_snapshot(repo, principal.user_id)
