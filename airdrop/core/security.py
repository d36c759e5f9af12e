from fastapi import Header, HTTPException
from telegram_webapps_authentication import Authenticator, InitialData
from typing import Optional

from .config import settings


def get_validated_data(
    telegram_data: Optional[str] = Header(None, alias="telegram-data")
) -> Optional[dict]:
    """
    A FastAPI dependency that validates Telegram initData.

    Returns None when verification is switched off (DEV_MODE, or no BOT_TOKEN
    configured); the request body is then trusted as-is.
    """
    if settings.dev_mode or not settings.bot_token:
        return None

    if not telegram_data:
        raise HTTPException(status_code=401, detail="telegram-data header is missing.")

    authenticator = Authenticator(settings.bot_token)
    try:
        validated_object: InitialData = authenticator.get_initial_data(telegram_data)
    except ValueError as e:
        print(f"--- Rejected telegram initData: {e}")
        raise HTTPException(status_code=401, detail=f"Authentication failed: {e}")

    user_dict = {
        "id": str(validated_object.user.id),
        "first_name": validated_object.user.first_name,
        "last_name": validated_object.user.last_name,
        "username": validated_object.user.username,
    }
    start_param = getattr(validated_object, "start_param", None)
    if start_param:
        user_dict["referral_code_used"] = start_param

    return {"user": user_dict}


def get_admin_user(
    admin_password: Optional[str] = Header(None, alias="admin-password")
) -> bool:
    if settings.admin_password and admin_password != settings.admin_password:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return True
