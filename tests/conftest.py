from __future__ import annotations

from typing import List

import numpy as np
import pytest

from spiralreality_ndarray.strided import ndarray


@pytest.fixture
def generic_buffer() -> List[float]:
    return [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0]


@pytest.fixture
def float64_view() -> ndarray:
    buffer = np.array([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0], dtype=np.float64)
    return ndarray("float64", buffer, [2, 2], [2, 1], 2, "row-major")
