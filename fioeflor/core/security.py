# fioeflor/core/security.py
# type: ignore
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from fioeflor.core.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ALGORITHM,
    APP_PASSWORD,
    APP_PASSWORD_HASH,
    SECRET_KEY,
)
from fioeflor.schemas.auth import TokenPayload

logger = logging.getLogger(__name__)

# ***************************************************************
# 1. Configuração de Segurança
# ***************************************************************

# Contexto para hashing de senhas (pbkdf2_sha256)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Esquema de autenticação para o FastAPI (endpoints protegidos)
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl="/api/auth/login" # Endpoint onde o token é obtido
)

# Assunto gravado no token: a loja tem um único acesso compartilhado
SESSION_SUBJECT = "loja"

# ***************************************************************
# 2. Senha da loja
# ***************************************************************

def get_password_hash(password: str) -> str:
    """Gera o hash de uma senha em texto puro."""
    return pwd_context.hash(password)

def _configured_password_hash() -> Optional[str]:
    if APP_PASSWORD_HASH:
        return APP_PASSWORD_HASH
    if APP_PASSWORD:
        return get_password_hash(APP_PASSWORD)
    logger.warning("Nenhuma senha configurada (APP_PASSWORD/APP_PASSWORD_HASH): o login ficará indisponível.")
    return None

_password_hash = _configured_password_hash()

def verify_app_password(plain_password: str) -> bool:
    """Verifica a senha informada contra a senha configurada da loja."""
    if _password_hash is None:
        return False
    return pwd_context.verify(plain_password, _password_hash)

# ***************************************************************
# 3. Criação e verificação do JWT
# ***************************************************************

def create_access_token(subject: Union[str, Any] = SESSION_SUBJECT, expires_delta: timedelta = None) -> str:
    """Cria um novo token de acesso JWT."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> TokenPayload:
    """Decodifica e valida um token JWT. Lança HTTPException (401) se falhar."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return TokenPayload(**payload)
    except (JWTError, ValidationError, TypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais inválidas ou token expirado.",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def require_session(token: str = Depends(reusable_oauth2)) -> TokenPayload:
    """Dependência que exige um token válido da loja."""
    token_data = decode_token(token)
    if token_data.sub != SESSION_SUBJECT:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais inválidas ou token expirado.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token_data
