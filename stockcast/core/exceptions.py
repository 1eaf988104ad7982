"""
Engine exception hierarchy

These never escape the public planning entry points: the service layer
catches them, logs, and degrades to a neutral result.
"""


class StockcastError(Exception):
    """Base error for the forecasting engine"""


class MissingDataError(StockcastError):
    """Product or movement data is absent (empty store, unknown product id)"""

    def __init__(self, detail: str, product_id=None):
        self.product_id = product_id
        super().__init__(detail)


class MalformedRecordError(StockcastError):
    """A raw product/movement record failed validation at the ingestion boundary"""

    def __init__(self, detail: str, record=None):
        self.record = record
        super().__init__(detail)
