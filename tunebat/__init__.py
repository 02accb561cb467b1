"""Tunebat integration modules."""

from tunebat.client import TunebatClient, TunebatError, TunebatRateLimited

__all__ = ["TunebatClient", "TunebatError", "TunebatRateLimited"]
