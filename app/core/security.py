from __future__ import annotations

from fastapi import HTTPException, status

from app.core.config import settings
from app.integrations.appwrite import AppwriteAccount, AppwriteClient, AppwriteError

_BEARER_PREFIX = "Bearer "


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized - No authorization token provided"},
        )
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized - No authorization token provided"},
        )
    return token


async def authenticate(client: AppwriteClient) -> AppwriteAccount:
    try:
        return await client.get_account()
    except AppwriteError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized - Invalid session"},
        ) from exc


def require_label(account: AppwriteAccount, label: str | None = None) -> None:
    required = label or settings.analytics_required_label
    if required in account.labels:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": (
                f'Forbidden - {required.capitalize()} access required. '
                f'Contact admin to add "{required}" label to your account.'
            ),
            "debug": {
                "userEmail": account.email,
                "labels": list(account.labels),
            },
        },
    )
