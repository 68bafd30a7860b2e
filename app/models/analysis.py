"""Structured chart analysis schema returned by the vision model.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON object the model is instructed to emit (``keyInsights``, ``gamePlan``,
``historicalAvg`` ...). Models accept either spelling when validating.
"""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DirectionLiteral = Literal["Bearish", "Bullish", "Neutral"]
LevelLiteral = Literal["Low", "Medium", "High"]
SentimentLiteral = Literal["Oversold", "Overbought", "Neutral"]


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Key insights

class TrendInsight(CamelModel):
    """Trend direction and strength."""

    direction: DirectionLiteral = Field(..., description="Overall trend direction")
    strength: str = Field(..., description="Qualitative strength, e.g. 'Strong'")
    probability: float = Field(..., description="Probability the trend continues (0-100)")


class VolatilityInsight(CamelModel):
    """Volatility reading compared with its historical average."""

    level: LevelLiteral
    value: str = Field(..., description="Current volatility reading, e.g. '2.4%'")
    historical_avg: str = Field(..., description="Historical average volatility")


class VolumeInsight(CamelModel):
    """Traded volume reading."""

    level: LevelLiteral
    value: str = Field(..., description="Current volume, e.g. '1.2M'")
    change: str = Field(..., description="Change against average volume, e.g. '+15%'")


class SentimentInsight(CamelModel):
    """Market sentiment derived from the chart."""

    status: SentimentLiteral
    value: str
    momentum: str


class KeyInsights(CamelModel):
    """Headline readings for the chart."""

    trend: TrendInsight
    volatility: VolatilityInsight
    volume: VolumeInsight
    sentiment: SentimentInsight


# Trading game plan

class GamePlan(CamelModel):
    """Trading strategy with its price levels.

    Attributes:
        strategy: Free-text description of the suggested approach
        support_level: Nearest support price
        resistance_level: Nearest resistance price
        stop_loss: Suggested stop loss price
        risk_reward: Risk/reward ratio as text, e.g. '1:2.5'
    """

    strategy: str
    support_level: float
    resistance_level: float
    stop_loss: float
    risk_reward: str


# Forecast

class TermForecast(CamelModel):
    """Prediction over one horizon."""

    prediction: str
    probability: float
    target_price: float
    timeframe: str = Field(..., description="Horizon of the prediction, e.g. '1-2 weeks'")


class KeyLevels(CamelModel):
    """Support and resistance price levels."""

    resistance: List[float] = Field(default_factory=list)
    support: List[float] = Field(default_factory=list)


class Forecast(CamelModel):
    """Short and medium term forecasts with key levels."""

    short_term: TermForecast
    medium_term: TermForecast
    key_levels: KeyLevels


# Statistics

class MovingAverages(CamelModel):
    sma20: float
    sma50: float
    sma200: float
    trend: DirectionLiteral


class Macd(CamelModel):
    value: float
    signal: float
    histogram: float


class Stochastic(CamelModel):
    k: float
    d: float


class Oscillators(CamelModel):
    rsi: float
    macd: Macd
    stochastic: Stochastic


class Statistics(CamelModel):
    """Indicator values read off the chart."""

    moving_averages: MovingAverages
    oscillators: Oscillators


class AnalysisResult(CamelModel):
    """Complete structured analysis of a chart image.

    Produced only by the response resolver from model output. Serialize with
    ``model_dump(by_alias=True)`` to get the wire shape.
    """

    key_insights: KeyInsights
    game_plan: GamePlan
    forecast: Forecast
    statistics: Statistics
    support_zones: List[float] = Field(default_factory=list)
