from __future__ import annotations

from app.models.credito import Credito

__all__ = ["Credito"]
