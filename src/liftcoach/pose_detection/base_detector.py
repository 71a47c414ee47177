from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np

from ..exercise_analysis import Landmark


class BasePoseDetector(ABC):
    """Base class for pose detection implementations."""

    @abstractmethod
    def detect(self, frame: np.ndarray) -> Tuple[bool, Optional[List[Landmark]]]:
        """
        Detect pose landmarks in the given frame.

        Args:
            frame: Input BGR frame as numpy array

        Returns:
            Tuple containing:
            - Boolean indicating if detection was successful
            - Landmarks in PoseLandmark index order (if successful) or None
        """
        pass

    def close(self) -> None:
        """Release model resources."""
