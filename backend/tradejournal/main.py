from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradejournal.api import backup, charts, health, imports, metrics, notes, portfolio, trades
from tradejournal.core.config import settings

app = FastAPI(title="Options Trading Journal API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(trades.router)
app.include_router(metrics.router)
app.include_router(portfolio.router)
app.include_router(imports.router)
app.include_router(backup.router)
app.include_router(notes.router)
app.include_router(charts.router)
