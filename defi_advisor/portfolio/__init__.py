"""Portfolio data contracts and the prompt-bounding summarizer."""

from .schemas import (  # noqa: F401
    NetworkHolding,
    PortfolioSnapshot,
    PortfolioSummary,
    TokenBalance,
    TopToken,
)
from .summarizer import summarize_portfolio  # noqa: F401
