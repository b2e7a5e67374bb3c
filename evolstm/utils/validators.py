"""
Validation utilities for the EVOLSTM forecaster.

This module provides validation for tabular input data before it is windowed.
"""

from typing import List, Optional

import numpy as np
import pandas as pd

from ..core.exceptions import ValidationError
from ..core.logging import get_logger


def validate_dataframe(
    df: pd.DataFrame,
    required_columns: Optional[List[str]] = None,
    numeric_columns: Optional[List[str]] = None,
    min_rows: int = 1,
    check_nulls: bool = True,
    check_infinite: bool = True
) -> bool:
    """
    Validate a pandas DataFrame of observations.

    Args:
        df: DataFrame to validate
        required_columns: List of required column names
        numeric_columns: Columns that must hold numeric values only
        min_rows: Minimum number of rows required
        check_nulls: Whether to reject null values in the numeric columns
        check_infinite: Whether to reject infinite values in the numeric columns

    Returns:
        True if validation passes

    Raises:
        ValidationError: If validation fails
    """
    logger = get_logger(__name__)

    if df is None:
        raise ValidationError("DataFrame cannot be None")

    if not isinstance(df, pd.DataFrame):
        raise ValidationError(f"Expected pandas DataFrame, got {type(df)}")

    if len(df) < min_rows:
        raise ValidationError(f"DataFrame must have at least {min_rows} rows, got {len(df)}")

    if required_columns:
        missing_columns = [col for col in required_columns if col not in df.columns]
        if missing_columns:
            raise ValidationError("Missing required columns", details=missing_columns)

    for col in numeric_columns or []:
        if not pd.api.types.is_numeric_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col]):
            raise ValidationError(f"Column '{col}' must be numeric, got dtype {df[col].dtype}")

        if check_nulls and df[col].isnull().any():
            raise ValidationError(f"Found null values in column: {col}")

        if check_infinite and np.isinf(df[col].to_numpy(dtype=float)).any():
            raise ValidationError(f"Found infinite values in column: {col}")

    logger.debug(f"DataFrame validation passed: {len(df)} rows, {len(df.columns)} columns")
    return True
