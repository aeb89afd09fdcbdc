"""Stocked: timed up/down crypto price prediction on-chain."""

__version__ = "0.1.0"
