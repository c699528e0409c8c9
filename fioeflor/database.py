# fioeflor/database.py

import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from fioeflor.core.config import DATABASE_URL

# *****************************************************************
# 1. Criar o Engine
# *****************************************************************
# O SQLite exige check_same_thread=False para ser usado pelo threadpool do FastAPI.
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Ativa as chaves estrangeiras em toda conexão SQLite."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# 2. Criar a Classe SessionLocal
# É a classe usada em cada requisição (request) à API.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 3. Criar a Classe Base
# Todos os modelos/tabelas herdam dela.
Base = declarative_base()

# Função de dependência (Dependency Injection) para obter uma sessão de DB
def get_db():
    """Fornece uma sessão de banco de dados a um endpoint do FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
