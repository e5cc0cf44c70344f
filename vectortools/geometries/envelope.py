# %% === Import necessary modules
from dataclasses import dataclass

import pandas as pd

# %% === Envelope
@dataclass(frozen=True)
class Envelope:
    """
    Axis aligned bounding box of a geometry, in 2 or 3 dimensions.

    An envelope is a snapshot: it is computed on demand from a geometry and
    does not follow later changes of that geometry.
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float | None = None
    max_z: float | None = None

    def __post_init__(self):
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError(f"Envelope minimums must not exceed maximums: {self}")
        if (self.min_z is None) != (self.max_z is None):
            raise ValueError("Envelope needs both min_z and max_z, or none of them.")

    @classmethod
    def from_extent(cls, extent: tuple[float, ...]) -> 'Envelope':
        """Build from (min_x, max_x, min_y, max_y[, min_z, max_z])."""
        return cls(*extent)

    @property
    def is_3d(self) -> bool:
        return self.min_z is not None

    @property
    def x_size(self) -> float:
        return self.max_x - self.min_x

    @property
    def y_size(self) -> float:
        return self.max_y - self.min_y

    @property
    def z_size(self) -> float | None:
        if not self.is_3d:
            return None
        return self.max_z - self.min_z

    def contains(self, other: 'Envelope') -> bool:
        """True if other lies entirely inside this envelope (in x and y)."""
        return (
            self.min_x <= other.min_x and other.max_x <= self.max_x and
            self.min_y <= other.min_y and other.max_y <= self.max_y
        )

    def intersects(self, other: 'Envelope') -> bool:
        return (
            self.min_x <= other.max_x and other.min_x <= self.max_x and
            self.min_y <= other.max_y and other.min_y <= self.max_y
        )

    def merge(self, other: 'Envelope') -> 'Envelope':
        """Smallest envelope containing both (3D only if both are 3D)."""
        if self.is_3d and other.is_3d:
            z_range = (min(self.min_z, other.min_z), max(self.max_z, other.max_z))
        else:
            z_range = (None, None)
        return Envelope(
            min(self.min_x, other.min_x),
            max(self.max_x, other.max_x),
            min(self.min_y, other.min_y),
            max(self.max_y, other.max_y),
            *z_range
        )

    def to_dataframe(self) -> pd.DataFrame:
        """
        Get min/max coordinates as a table.

        Returns:
            pd.DataFrame: A DataFrame with 'min' and 'max' rows and 'x', 'y' (and 'z' if 3D) columns.
        """
        columns = ['x', 'y']
        rows = [[self.min_x, self.min_y], [self.max_x, self.max_y]]
        if self.is_3d:
            columns.append('z')
            rows[0].append(self.min_z)
            rows[1].append(self.max_z)

        df = pd.DataFrame(
                rows,
                columns=columns,
                index=['min', 'max']
            )

        return df
