# fioeflor/main.py
# type: ignore

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fioeflor.core.errors import DomainError
from fioeflor.core.security import require_session
from fioeflor.database import Base, engine

# ***************************************************************
# 1. Importar todos os modelos para que o SQLAlchemy os registre
# ***************************************************************
import fioeflor.models.inventory # Insumo, Material, Produto e vínculos
import fioeflor.models.sales # Cliente, Venda e itens

# ***************************************************************
# 2. Importar os Routers da API
# ***************************************************************
from fioeflor.api.v1.endpoints import auth
from fioeflor.api.v1.endpoints import customers
from fioeflor.api.v1.endpoints import materials
from fioeflor.api.v1.endpoints import products
from fioeflor.api.v1.endpoints import sales
from fioeflor.api.v1.endpoints import supplies

logger = logging.getLogger(__name__)


def create_tables():
    """Cria todas as tabelas do banco de dados se não existirem."""
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info("Tabelas verificadas/criadas.")
    yield


# Inicializar a aplicação FastAPI
app = FastAPI(
    title="Fio e Flor API",
    version="v1",
    description="Backend de estoque e vendas: insumos, materiais, produtos, clientes e vendas.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ***************************************************************
# 3. Tratamento de erros: envelope {"error": "..."}
# ***************************************************************
@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"campo": ".".join(str(part) for part in error["loc"]), "mensagem": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Dados inválidos", "detalhes": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Erro não tratado em %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Erro interno do servidor"},
    )

# ***************************************************************
# 4. Incluir os Routers
# ***************************************************************
protected = [Depends(require_session)]

# Router de Autenticação (público)
app.include_router(auth.router, tags=["Auth"], prefix="/api/auth")

app.include_router(supplies.router, tags=["Insumos"], prefix="/api/insumos", dependencies=protected)
app.include_router(materials.router, tags=["Materiais"], prefix="/api/materiais", dependencies=protected)
app.include_router(products.router, tags=["Produtos"], prefix="/api/produtos", dependencies=protected)
app.include_router(customers.router, tags=["Clientes"], prefix="/api/clientes", dependencies=protected)
app.include_router(sales.router, tags=["Vendas"], prefix="/api/vendas", dependencies=protected)


@app.get("/api")
def read_api_root():
    return {"message": "API Fio e Flor"}


@app.get("/health")
def health_check():
    return {"status": "OK", "message": "Servidor Fio e Flor rodando!"}
