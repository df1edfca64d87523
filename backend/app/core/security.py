"""
Modulo di sicurezza per autenticazione JWT
Progetto: Invoice Manager (Gestionale Fatture)

Funzioni per hashing password e gestione token JWT.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import AuthError
from app.schemas.token import TokenPayload

# Context per hashing password
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hasha una password in chiaro.

    Args:
        password: Password in chiaro

    Returns:
        Password hashata
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifica una password in chiaro contro una hashata.

    Args:
        plain_password: Password in chiaro
        hashed_password: Password hashata

    Returns:
        True se la password corrisponde, False altrimenti
    """
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Verifica a vuoto con lo stesso costo di verify_password (utente sconosciuto)."""
    pwd_context.dummy_verify()


def create_access_token(
    user_id: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Crea un token di accesso JWT.

    Il claim `jti` identifica il token per l'eventuale revoca al logout.

    Args:
        user_id: ID dell'utente
        role: Ruolo dell'utente
        expires_delta: Durata del token (default: da settings)

    Returns:
        Token JWT codificato
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta

    payload = {
        "sub": user_id,
        "role": role,
        "exp": expire,
        "jti": uuid.uuid4().hex,
        "type": "access",
    }

    return jwt.encode(
        payload,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> TokenPayload:
    """
    Decodifica e valida un token JWT.

    Args:
        token: Token JWT da decodificare

    Returns:
        TokenPayload con i dati del token

    Raises:
        AuthError: Se il token è invalido o scaduto
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError:
        raise AuthError("Token scaduto, effettuare di nuovo il login")
    except JWTError:
        raise AuthError("Token invalido")

    if not payload.get("sub") or not payload.get("jti") or payload.get("exp") is None:
        raise AuthError("Token invalido: claim mancanti")

    return TokenPayload(
        sub=payload["sub"],
        role=payload.get("role", ""),
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        jti=payload["jti"],
        type=payload.get("type", ""),
    )


# Export delle funzioni
__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
]
