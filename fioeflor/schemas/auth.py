# fioeflor/schemas/auth.py
# type: ignore

from typing import Optional

from pydantic import BaseModel, Field

# ***************************************************************
# 1. Schemas de Autenticação (JWT)
# ***************************************************************
class LoginRequest(BaseModel):
    """Schema para a requisição de login (senha única da loja)."""
    password: str = Field(..., min_length=1)

class Token(BaseModel):
    """Modelo para a resposta com o token de acesso."""
    access_token: str
    token_type: str = "bearer"

class TokenPayload(BaseModel):
    """Modelo para a carga útil (payload) do JWT."""
    sub: Optional[str] = None
    exp: Optional[int] = None
