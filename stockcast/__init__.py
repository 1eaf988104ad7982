"""
Stockcast - demand forecasting and replenishment planning

Author: TM3
Date: 2026-02-16
"""
from stockcast.services.forecast_config import ForecastConfig
from stockcast.services.replenishment_service import ReplenishmentService, get_replenishment_service

__version__ = "0.1.0"

__all__ = ['ForecastConfig', 'ReplenishmentService', 'get_replenishment_service']
