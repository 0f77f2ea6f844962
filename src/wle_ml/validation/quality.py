import pandas as pd
import numpy as np


def check_data_quality(df: pd.DataFrame) -> dict:
    quality_report = {
        "total_rows": len(df),
        "missing_values": df.isnull().sum().to_dict(),
        "duplicate_rows": int(df.duplicated().sum()),
    }

    numeric_cols = df.select_dtypes(include=[np.number]).columns
    quality_report["missing_fraction"] = {
        col: float(df[col].isnull().mean()) if len(df) else 0.0 for col in numeric_cols
    }
    quality_report["constant_columns"] = [col for col in numeric_cols if df[col].nunique(dropna=True) <= 1]

    return quality_report


def sparse_columns(df: pd.DataFrame, max_missing: float = 0.5) -> list[str]:
    """Columns whose fraction of missing values exceeds ``max_missing``."""
    fractions = df.isnull().mean()
    return fractions[fractions > max_missing].index.tolist()
