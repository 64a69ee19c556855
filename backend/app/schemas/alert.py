"""Pydantic schemas for alerts."""

from pydantic import BaseModel
from typing import Dict, Any, List
from datetime import datetime
import enum


class AlertType(str, enum.Enum):
    """Alert type enumeration."""
    unusual_expense = "unusual_expense"
    recurring_missed = "recurring_missed"


class Severity(str, enum.Enum):
    """Alert severity enumeration."""
    info = "info"
    warning = "warning"
    critical = "critical"


class AlertResponse(BaseModel):
    id: str
    type: AlertType
    severity: Severity
    title: str
    description: str
    data: Dict[str, Any] = {}
    created_at: datetime


class AlertsListResponse(BaseModel):
    items: List[AlertResponse]
    total: int
