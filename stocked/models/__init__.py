from stocked.models.bet import Bet, BetDirection, BetOutcome, BetRequest, PredictionResult
from stocked.models.market import Kline, PricePoint, Ticker, TokenQuote
from stocked.models.network import Network

__all__ = [
    "Bet",
    "BetDirection",
    "BetOutcome",
    "BetRequest",
    "Kline",
    "Network",
    "PredictionResult",
    "PricePoint",
    "Ticker",
    "TokenQuote",
]
