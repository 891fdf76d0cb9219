"""
Module principal de l'application FastAPI Budget Manager.

Ce module configure et initialise l'instance FastAPI, ajoute les middlewares nécessaires (CORS),
monte les fichiers statiques (images des budgets) et inclut les routeurs de l'API
(clients, budgets, tableau de bord).
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from budget_manager.config import settings
from budget_manager.database import create_tables

# --- Importer les routeurs ---
from budget_manager.clients.router import client_router
from budget_manager.budgets.router import budget_router
from budget_manager.dashboard.router import dashboard_router

# Configurer le logging
logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_CREATE_TABLES:
        logger.info("Création des tables si nécessaire...")
        await create_tables()
    yield


app = FastAPI(
    title="Budget Manager API",
    description="API de gestion des clients, des budgets (matières, extras, options de prix, délais) et de leurs PDF.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "Content-Disposition"],
)

# Images des budgets servies sous /static/<bucket>/<nom>
app.mount("/static", StaticFiles(directory=settings.STATIC_DIR, check_dir=False), name="static")

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(client_router, prefix=settings.API_V1_PREFIX)
app.include_router(budget_router, prefix=settings.API_V1_PREFIX)
app.include_router(dashboard_router, prefix=settings.API_V1_PREFIX)


@app.get("/", tags=["Root"])
async def read_root():
    return {"message": "Budget Manager API"}
