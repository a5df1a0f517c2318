"""
Feature vectorization for loan application records.

Maps a raw field -> value record onto the bundle's feature ordering
(numeric copy-through plus one-hot categoricals) and standardizes it
with the bundle's scaler statistics.
"""

import math
from typing import Any, Mapping, Optional, Sequence

import numpy as np

from loan_explainer.data.bundle import ModelBundle
from loan_explainer.utils.constants import CATEGORICAL_FIELDS, NUMERIC_FEATURES
from loan_explainer.utils.logger import LoggerMixin


def parse_numeric(value: Any) -> Optional[float]:
    """Parse a form value to a finite float, or None if it cannot be used."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class FeatureVectorizer(LoggerMixin):
    """
    Encodes application records into standardized feature vectors.

    Missing or unparsable numeric values fall back to 0.0 and unknown
    categorical values are ignored, so every record yields a vector.
    """

    def __init__(
        self,
        numeric_fields: Sequence[str] = NUMERIC_FEATURES,
        categorical_fields: Sequence[str] = CATEGORICAL_FIELDS,
    ):
        """
        Initialize the vectorizer.

        Args:
            numeric_fields: Record fields copied into the vector as numbers.
            categorical_fields: Record fields one-hot encoded as "<field>_<value>".
        """
        self.numeric_fields = tuple(numeric_fields)
        self.categorical_fields = tuple(categorical_fields)

    def encode(self, record: Mapping[str, Any], bundle: ModelBundle) -> np.ndarray:
        """Encode and standardize a record."""
        return self.standardize(self.encode_raw(record, bundle), bundle)

    def encode_raw(self, record: Mapping[str, Any], bundle: ModelBundle) -> np.ndarray:
        """
        Encode a record without standardization.

        Args:
            record: Field name -> raw value (string or number).
            bundle: Model bundle defining the feature ordering.

        Returns:
            Dense vector of length N in bundle order.
        """
        raw = np.zeros(bundle.n_features, dtype=float)

        for field in self.numeric_fields:
            idx = bundle.feature_index(field)
            if idx is None:
                continue
            value = parse_numeric(record.get(field))
            if value is None:
                if record.get(field) not in (None, ""):
                    self.logger.debug(f"Unparsable value for {field}, defaulting to 0.0")
                continue
            raw[idx] = value

        for field in self.categorical_fields:
            value = record.get(field)
            if value is None or value == "":
                continue
            idx = bundle.feature_index(f"{field}_{value}")
            if idx is None:
                self.logger.debug(f"No encoding for {field}={value!r}, ignoring")
                continue
            raw[idx] = 1.0

        return raw

    def standardize(self, raw: np.ndarray, bundle: ModelBundle) -> np.ndarray:
        """Apply (raw - mean) / scale per feature."""
        bundle.check_vector(raw)
        return (raw - bundle.mean_array) / bundle.scale_array

    def unmapped_fields(self, bundle: ModelBundle) -> list[str]:
        """Configured numeric fields the bundle has no feature for."""
        return [f for f in self.numeric_fields if bundle.feature_index(f) is None]
