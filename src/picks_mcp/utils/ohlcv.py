"""Price bar standardization utilities."""

from collections.abc import Sequence
from datetime import date

import numpy as np
import pandas as pd

from picks_mcp.models import PriceBar

# Canonical column order for price frames
PRICE_COLUMNS = ["date", "close", "volume"]


def standardize_ohlcv(df: pd.DataFrame) -> pd.DataFrame:
    """
    Standardize a raw yfinance frame to the canonical price schema.

    Output columns (always, in this order): date, close, volume.
    Dates are datetime.date values; rows are ascending by date.

    Args:
        df: Raw DataFrame from yf.download (date index, capitalized columns)

    Returns:
        Standardized DataFrame
    """
    df = df.copy()

    # Handle multi-index from yf.download (ticker as second level)
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)

    # Lowercase all column names
    df.columns = [str(c).lower() for c in df.columns]

    # Reset index to make date a column
    df = df.reset_index()
    date_cols = [c for c in df.columns if str(c).lower() in ("date", "datetime", "index")]
    if date_cols:
        df = df.rename(columns={date_cols[0]: "date"})

    # Fill missing columns with NaN for schema stability
    for col in PRICE_COLUMNS:
        if col not in df.columns:
            df[col] = np.nan

    if pd.api.types.is_datetime64_any_dtype(df["date"]):
        df["date"] = df["date"].dt.date

    return _clean(df[PRICE_COLUMNS])


def bars_to_frame(bars: Sequence[PriceBar]) -> pd.DataFrame:
    """
    Build the canonical price frame from provider bars.

    Drops rows with non-finite close/volume or non-positive close, sorts
    ascending by date, and keeps the last bar for any duplicated date.
    """
    df = pd.DataFrame(
        [(bar.date, bar.close, bar.volume) for bar in bars],
        columns=PRICE_COLUMNS,
    )
    return _clean(df)


def frame_to_bars(df: pd.DataFrame) -> list[PriceBar]:
    """Convert a canonical price frame back to PriceBar records."""
    return [
        PriceBar(date=_as_date(row.date), close=float(row.close), volume=float(row.volume))
        for row in df.itertuples(index=False)
    ]


def df_to_csv(df: pd.DataFrame) -> str:
    """Convert to CSV string for cache/resource."""
    return df.to_csv(index=False)


def _as_date(value: date | pd.Timestamp | str) -> date:
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _clean(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["close"] = pd.to_numeric(df["close"], errors="coerce").astype("float64")
    df["volume"] = pd.to_numeric(df["volume"], errors="coerce").astype("float64")

    valid = (
        np.isfinite(df["close"])
        & np.isfinite(df["volume"])
        & (df["close"] > 0)
        & (df["volume"] >= 0)
        & df["date"].notna()
    )
    df = df[valid]

    df = df.sort_values("date", kind="stable")
    df = df.drop_duplicates(subset="date", keep="last")
    return df.reset_index(drop=True)
