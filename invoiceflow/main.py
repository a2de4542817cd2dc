from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from invoiceflow.core.config import settings
from invoiceflow.core.logging import configure_logging
from invoiceflow.db.mongo import connect_to_mongo, close_mongo_connection
from invoiceflow.api.v1.api import api_router

configure_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {"message": "Welcome to Invoice Flow API"}

app.include_router(api_router, prefix=settings.API_V1_STR)
