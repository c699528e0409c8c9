# fioeflor/api/v1/endpoints/auth.py
# type: ignore

from fastapi import APIRouter, HTTPException, status

from fioeflor.core.security import create_access_token, verify_app_password
from fioeflor.schemas.auth import LoginRequest, Token

router = APIRouter()


# ***************************************************************
# 1. Endpoint de Login (senha única da loja)
# ***************************************************************
@router.post("/login", response_model=Token)
def login_for_access_token(login_in: LoginRequest):
    """Valida a senha da loja e devolve um token JWT."""
    if not verify_app_password(login_in.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Senha incorreta.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"access_token": create_access_token(), "token_type": "bearer"}
