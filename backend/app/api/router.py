"""
Main API router.
"""

from fastapi import APIRouter
from app.api import alerts, recurring, transactions

api_router = APIRouter()

api_router.include_router(transactions.router)
api_router.include_router(recurring.router)
api_router.include_router(alerts.router)
