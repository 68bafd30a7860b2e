"""Pytest configuration and shared fixtures."""

import json
from typing import Any, Dict, List

import pytest

from app.models.analysis import AnalysisResult
from app.models.conversation import Turn
from app.models.request import ChartImage

# Minimal PNG header; providers never see these bytes in tests
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def build_analysis_payload(
    direction: str = "Bearish",
    rsi: float = 28.5,
) -> Dict[str, Any]:
    """Build a complete analysis object in its camelCase wire shape."""
    return {
        "keyInsights": {
            "trend": {"direction": direction, "strength": "Strong", "probability": 78.5},
            "volatility": {"level": "Medium", "value": "2.5%", "historicalAvg": "1.8%"},
            "volume": {"level": "Medium", "value": "1.2M", "change": "+15.3%"},
            "sentiment": {"status": "Oversold", "value": "28", "momentum": "Decreasing"},
        },
        "gamePlan": {
            "strategy": "Buy the pullback near key support; watch for reversal signals.",
            "supportLevel": 47898.35,
            "resistanceLevel": 48353.57,
            "stopLoss": 46128.60,
            "riskReward": "2:1",
        },
        "forecast": {
            "shortTerm": {
                "prediction": "Bearish Reversal",
                "probability": 75.0,
                "targetPrice": 46500.0,
                "timeframe": "1-3 days",
            },
            "mediumTerm": {
                "prediction": "Bullish Recovery",
                "probability": 65.0,
                "targetPrice": 49200.0,
                "timeframe": "1-2 weeks",
            },
            "keyLevels": {
                "resistance": [48353.57, 48900.0, 49500.0],
                "support": [47898.35, 47123.45, 46789.2],
            },
        },
        "statistics": {
            "movingAverages": {
                "sma20": 48150.25,
                "sma50": 47890.15,
                "sma200": 46750.8,
                "trend": "Bearish",
            },
            "oscillators": {
                "rsi": rsi,
                "macd": {"value": -45.2, "signal": -42.8, "histogram": -2.4},
                "stochastic": {"k": 15.5, "d": 18.2},
            },
        },
        "supportZones": [47898.35, 47123.45, 46789.2],
    }


@pytest.fixture
def payload_builder():
    """Factory for analysis payloads with chosen direction and RSI."""
    return build_analysis_payload


@pytest.fixture
def analysis_payload() -> Dict[str, Any]:
    """Sample analysis object as the model would emit it."""
    return build_analysis_payload()


@pytest.fixture
def analysis_result(analysis_payload) -> AnalysisResult:
    """Sample parsed AnalysisResult."""
    return AnalysisResult.model_validate(analysis_payload)


@pytest.fixture
def analysis_reply(analysis_payload) -> str:
    """Model reply wrapping the analysis object in prose."""
    return (
        "Here is my analysis of the chart:\n\n"
        f"{json.dumps(analysis_payload, indent=2)}\n\n"
        "Let me know if you want more detail on any level."
    )


@pytest.fixture
def chart_image() -> ChartImage:
    """Sample PNG chart image."""
    return ChartImage(data=PNG_BYTES, media_type="image/png")


@pytest.fixture
def first_exchange() -> List[Turn]:
    """One completed exchange: a question and a structured answer."""
    return [
        Turn(role="user", content="What's the trend?"),
        Turn(role="assistant", content=json.dumps(build_analysis_payload())),
    ]
