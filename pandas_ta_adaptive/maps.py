# -*- coding: utf-8 -*-
from enum import Enum

from pandas_ta_adaptive.utils import InvalidParameterError


class AverageKind(str, Enum):
    """One member per moving-average algorithm the resolver can dispatch."""
    # static weighted leaves
    SMA = "sma"
    WMA = "wma"
    LWMA = "lwma"
    FWMA = "fwma"
    # one-pole recursive
    EMA = "ema"
    WWMA = "wwma"
    KAMA = "kama"
    PKAMA = "pkama"
    BAMA = "bama"
    VIDYA = "vidya"
    AMA = "ama"
    AEMA = "aema"
    AARMA = "aarma"
    ARMA = "arma"
    VLMA = "vlma"
    FRAMA = "frama"
    MCGD = "mcgd"
    AHMA = "ahma"
    JMA = "jma"
    MAMA = "mama"
    ADEMA = "adema"
    AFEMA = "afema"
    UMA = "uma"
    # regression style
    ALS = "als"
    AF = "af"
    # pole filters
    SSF2 = "ssf2"
    BUTTER2 = "butter2"
    SSF3 = "ssf3"
    BUTTER3 = "butter3"
    GAUSS = "gauss"
    # kalman style
    PKF = "pkf"
    KS = "ks"
    # cascades
    DEMA = "dema"
    TEMA = "tema"
    QEMA = "qema"
    PEMA = "pema"
    T3 = "t3"
    ZLEMA = "zlema"
    ZLTEMA = "zltema"
    TMA = "tma"
    HMA = "hma"
    LSMA = "lsma"

    def __str__(self) -> str:
        return self.value


class InputName(str, Enum):
    """Default-input selector choices for an OHLCV frame."""
    CLOSE = "close"
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    VOLUME = "volume"
    TYPICAL_PRICE = "typical"
    FULL_TYPICAL_PRICE = "full_typical"
    MEDIAN_PRICE = "median"
    WEIGHTED_CLOSE = "weighted_close"
    MIDPOINT = "midpoint"
    MIDPRICE = "midprice"
    AVERAGE_PRICE = "average"

    def __str__(self) -> str:
        return self.value


class Signal(str, Enum):
    STRONG_BUY = "strong_buy"
    BUY = "buy"
    NEUTRAL = "neutral"
    SELL = "sell"
    STRONG_SELL = "strong_sell"

    def __str__(self) -> str:
        return self.value


def as_kind(kind) -> AverageKind:
    """Accept an ``AverageKind`` or its string value (case-insensitive)."""
    if isinstance(kind, AverageKind):
        return kind
    try:
        return AverageKind(str(kind).lower())
    except ValueError:
        raise InvalidParameterError(f"Unknown moving average kind: {kind!r}") from None
