from __future__ import annotations
import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder


def preprocess_df(df: pd.DataFrame, label_col: str, group_labels: tuple) -> pd.DataFrame:
    """Validate labels and turn every feature column numeric.

    Rows with a missing label are dropped. Non-numeric and categorical feature columns
    are label-encoded; everything else is cast to float. Row order is kept and
    the index is reset so positional and label indexing agree.
    """
    if label_col not in df.columns:
        raise ValueError(f"Expected a '{label_col}' label column.")
    df = df.dropna(subset=[label_col]).reset_index(drop=True)

    unknown = set(df[label_col].unique()) - set(group_labels)
    if unknown:
        raise ValueError(f"Unexpected labels in '{label_col}': {sorted(map(str, unknown))}; expected {list(group_labels)}")

    feature_cols = [c for c in df.columns if c != label_col]
    if not feature_cols:
        raise ValueError("Dataset has no feature columns.")

    out = df.copy()
    for col in feature_cols:
        if not pd.api.types.is_numeric_dtype(out[col]) or isinstance(out[col].dtype, pd.CategoricalDtype):
            le = LabelEncoder()
            out[col] = le.fit_transform(out[col].astype(str))
        out[col] = out[col].astype(np.float64)

    if out[feature_cols].isna().any().any():
        raise ValueError("Feature columns contain missing values.")
    return out
