"""Per-curve width and resolution settings.

Every curve of a road has its own `CurveSettings`.  Entries are created
lazily the first time a curve is looked up, using the road-wide
defaults that are current at that moment, and are kept in insertion
order so that the persisted record list is stable.
"""

from dataclasses import dataclass, asdict
from typing import Callable, Dict, Iterable, List, Optional

from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CurveSettings:
    """Width and resolution of a single curve."""

    curve_index: int
    """Index of the curve in the curve container."""

    width: float
    """Offset from the centre line to each road edge."""

    resolution: int
    """Number of quads generated along the curve."""

    def to_record(self) -> Dict:
        return asdict(self)


class SettingsStore:
    """Lazy lookup of `CurveSettings` keyed by curve index.

    Parameters
    ----------
    num_curves : callable
        Returns the current number of curves; indices outside
        ``[0, num_curves())`` are rejected.
    default_width, default_resolution : float, int
        Values used for entries created on first access.
    on_change : callable, optional
        Invoked after every explicit width or resolution override.
    """

    def __init__(
        self,
        num_curves: Callable[[], int],
        default_width: float = 2.0,
        default_resolution: int = 10,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._num_curves = num_curves
        self.default_width = default_width
        self.default_resolution = default_resolution
        self.on_change = on_change
        self._settings: Dict[int, CurveSettings] = {}

    def __len__(self) -> int:
        return len(self._settings)

    def __contains__(self, curve_index: int) -> bool:
        return curve_index in self._settings

    def is_valid_index(self, curve_index: int) -> bool:
        return 0 <= curve_index < self._num_curves()

    def get(self, curve_index: int) -> Optional[CurveSettings]:
        """Return the settings for ``curve_index``, creating them if needed.

        Returns None, and logs a warning, when the index is out of
        range.
        """
        if not self.is_valid_index(curve_index):
            logger.warning(f"Invalid curve index {curve_index}, no settings returned")
            return None
        settings = self._settings.get(curve_index)
        if settings is None:
            settings = CurveSettings(curve_index, self.default_width, self.default_resolution)
            self._settings[curve_index] = settings
        return settings

    def set_width(self, curve_index: int, width: float) -> bool:
        """Override the width of one curve.

        Returns False, without touching the store or notifying, when
        the index is out of range.
        """
        if width < 0:
            raise ValueError("width must be non-negative")
        if not self.is_valid_index(curve_index):
            logger.warning(f"Ignoring width override for invalid curve index {curve_index}")
            return False
        self.get(curve_index).width = float(width)
        self._changed()
        return True

    def set_resolution(self, curve_index: int, resolution: int) -> bool:
        """Override the resolution of one curve.

        Returns False, without touching the store or notifying, when
        the index is out of range.
        """
        if resolution < 0:
            raise ValueError("resolution must be non-negative")
        if not self.is_valid_index(curve_index):
            logger.warning(f"Ignoring resolution override for invalid curve index {curve_index}")
            return False
        self.get(curve_index).resolution = int(resolution)
        self._changed()
        return True

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def to_records(self) -> List[Dict]:
        """Snapshot the settings as an ordered list of records."""
        return [s.to_record() for s in self._settings.values()]

    @staticmethod
    def parse_records(records: Iterable[Dict]) -> Dict[int, CurveSettings]:
        """Build a lookup map from ``records`` without touching any store.

        Records are taken in order; a later record for the same curve
        index replaces an earlier one.

        Raises
        ------
        ValueError
            If a record carries a negative width or resolution.
        KeyError
            If a record misses one of its fields.
        """
        parsed: Dict[int, CurveSettings] = {}
        for record in records:
            settings = CurveSettings(
                int(record["curve_index"]),
                float(record["width"]),
                int(record["resolution"]),
            )
            if settings.width < 0:
                raise ValueError(
                    f"curve {settings.curve_index}: width must be non-negative, got {settings.width}"
                )
            if settings.resolution < 0:
                raise ValueError(
                    f"curve {settings.curve_index}: resolution must be non-negative, "
                    f"got {settings.resolution}"
                )
            parsed[settings.curve_index] = settings
        return parsed

    def load_records(self, records: Iterable[Dict]) -> None:
        """Replace the lookup map with the entries of ``records``.

        The store is left unchanged if any record is invalid.
        """
        self._settings = self.parse_records(records)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Dict],
        num_curves: Callable[[], int],
        default_width: float = 2.0,
        default_resolution: int = 10,
        on_change: Optional[Callable[[], None]] = None,
    ) -> "SettingsStore":
        store = cls(num_curves, default_width, default_resolution, on_change)
        store.load_records(records)
        return store
