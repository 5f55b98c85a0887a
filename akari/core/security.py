"""
Seguridad: Manejo de JWT y validación del initData de Telegram WebApp
"""

import hashlib
import hmac
import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import parse_qsl

from jose import JWTError, jwt

from akari.core.config import get_settings

logger = logging.getLogger(__name__)


class TelegramAuthError(Exception):
    """Se lanza cuando falla la validación del initData de Telegram"""
    pass


def verify_telegram_init_data(init_data: str, now: Optional[float] = None) -> dict:
    """
    Valida el initData que Telegram entrega al WebApp y retorna el usuario

    Lo que retorna: {id, username, first_name, ...} (el JSON del campo `user`)

    Algoritmo (documentado por Telegram):
    secret = HMAC_SHA256(key="WebAppData", msg=bot_token)
    hash = HMAC_SHA256(key=secret, msg=data_check_string)

    Lanza TelegramAuthError si algo está mal
    """
    settings = get_settings()

    if not init_data:
        raise TelegramAuthError("initData vacío")

    data = dict(parse_qsl(init_data, keep_blank_values=True))
    received_hash = data.pop("hash", "")
    if not received_hash:
        raise TelegramAuthError("initData sin hash")

    data_check_string = "\n".join(f"{k}={v}" for k, v in sorted(data.items()))
    secret_key = hmac.new(b"WebAppData", settings.telegram_bot_token.encode(), hashlib.sha256).digest()
    calculated_hash = hmac.new(secret_key, data_check_string.encode(), hashlib.sha256).hexdigest()

    if not hmac.compare_digest(calculated_hash, received_hash):
        logger.warning("❌ initData con hash inválido")
        raise TelegramAuthError("Firma de initData inválida")

    # Verifico que el initData no sea demasiado viejo
    auth_date = int(data.get("auth_date", 0) or 0)
    now = now if now is not None else time.time()
    if now - auth_date > settings.telegram_init_data_max_age:
        raise TelegramAuthError("initData expirado")

    try:
        user = json.loads(data.get("user", ""))
    except ValueError:
        raise TelegramAuthError("initData sin usuario")

    if not isinstance(user, dict) or "id" not in user:
        raise TelegramAuthError("initData sin usuario")

    return user


def create_access_token(user_id: str, telegram_id: str) -> str:
    """
    Crea un JWT para que el usuario pueda hacer requests autenticados

    El JWT contiene el user_id y expira en 7 días
    """
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)

    payload = {
        "sub": user_id,      # Subject: el usuario
        "tg": telegram_id,
        "exp": expire,       # Expiración
        "iat": datetime.now(timezone.utc),  # Issued at (cuándo se creó)
    }

    # Firmo el token con nuestra clave secreta
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decodifica y valida un JWT

    Retorna el payload si es válido, None si está expirado o corrupto
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        # Token inválido, expirado, o corrupto
        return None
