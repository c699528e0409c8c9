# fioeflor/core/config.py
# type: ignore

import logging
import os
import sys
from decimal import Decimal

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# *****************************************************************
# 1. Carregar o .env da raiz do projeto (se existir)
# *****************************************************************
load_dotenv()

# *****************************************************************
# 2. Banco de dados
# *****************************************************************
DATABASE_URL = os.getenv("DATABASE_URL")

if DATABASE_URL is None:
    logger.critical("A variável de ambiente 'DATABASE_URL' não foi encontrada.")
    sys.exit(1)

# *****************************************************************
# 3. Autenticação (senha única da loja + JWT)
# *****************************************************************
# Troque em produção e carregue do .env!
SECRET_KEY = os.getenv("SECRET_KEY", "CHAVE_SECRETA_DE_DESENVOLVIMENTO_TROQUE_NO_ENV")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))

APP_PASSWORD = os.getenv("APP_PASSWORD")
APP_PASSWORD_HASH = os.getenv("APP_PASSWORD_HASH")

# *****************************************************************
# 4. Regras de estoque
# *****************************************************************
# Custo unitário aplicado a insumos da categoria "Haste" quando não informado
DEFAULT_STEM_UNIT_COST = Decimal(os.getenv("DEFAULT_STEM_UNIT_COST", "1.50"))

# Faixas do indicador de nível de estoque
LOW_STOCK_THRESHOLD = Decimal(os.getenv("LOW_STOCK_THRESHOLD", "100"))
MEDIUM_STOCK_THRESHOLD = Decimal(os.getenv("MEDIUM_STOCK_THRESHOLD", "200"))
