# hamlet/game/errors.py
from __future__ import annotations

from datetime import datetime
from typing import Any


class CatalogError(ValueError):
    """Raised at import time when the building tables are inconsistent."""


class VillageError(Exception):
    """
    Base for every rejected village operation.

    `code` is the stable error kind surfaced to API clients,
    `status_code` is the HTTP status the router maps it to.
    """

    code = "VillageError"
    status_code = 400
    message = "Village operation failed"

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.detail_message = message or self.message
        self._context = context
        super().__init__(self.detail_message)

    def context(self) -> dict:
        out = {}
        for k, v in self._context.items():
            out[k] = v.isoformat() if isinstance(v, datetime) else v
        return out

    def to_detail(self) -> dict:
        return {"error": self.code, "message": self.detail_message, **self.context()}


class VillageNotFound(VillageError):
    code = "VillageNotFound"
    status_code = 404
    message = "Village not found"


class UnknownBuilding(VillageError):
    code = "UnknownBuilding"
    status_code = 404
    message = "Unknown building"


class UnknownLevel(VillageError):
    code = "UnknownLevel"
    status_code = 404
    message = "No upgrade duration for level"


class NotOwner(VillageError):
    code = "NotOwner"
    status_code = 403
    message = "Actor does not own this village"


class UpgradeInProgress(VillageError):
    code = "UpgradeInProgress"
    status_code = 409
    message = "Upgrade already in progress"


class MaxLevelReached(VillageError):
    code = "MaxLevelReached"
    status_code = 409
    message = "Max level reached"


class PrerequisiteNotMet(VillageError):
    code = "PrerequisiteNotMet"
    status_code = 409
    message = "Prerequisites not met"


class InsufficientFunds(VillageError):
    code = "InsufficientFunds"
    status_code = 402
    message = "Insufficient funds"


class TokenAlreadyMinted(VillageError):
    code = "TokenAlreadyMinted"
    status_code = 409
    message = "Ownership token already minted for village"
