"""
Sample buildings for the inference workbench.

Two years of monthly (average outdoor temperature °F, energy use) pairs for
three archetypes, each with the model shape that suits it.
"""

from dataclasses import dataclass
from typing import Dict, Tuple
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Dataset:
    """Monthly baseline observations for one building."""

    key: str
    name: str
    description: str
    unit: str
    fuel: str
    suggested_shape: str
    months: Tuple[str, ...]
    temps: Tuple[float, ...]
    energy: Tuple[float, ...]

    @property
    def temperatures(self) -> NDArray[np.float64]:
        return np.array(self.temps, dtype=np.float64)

    @property
    def usage(self) -> NDArray[np.float64]:
        return np.array(self.energy, dtype=np.float64)


_MONTHS = tuple(
    f"{m}-{yy}"
    for yy in ("22", "23")
    for m in ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
)


DATASETS: Dict[str, Dataset] = {
    "heating": Dataset(
        key="heating",
        name="Office - Heating Dominant",
        description="50,000 sq ft office in Chicago. Monthly gas (therms). "
                    "Strong heating dependency.",
        unit="therms",
        fuel="Natural Gas",
        suggested_shape="3PH",
        months=_MONTHS,
        temps=(26, 30, 40, 52, 62, 72, 77, 75, 66, 54, 40, 28,
               24, 28, 38, 50, 60, 70, 78, 76, 64, 52, 38, 26),
        energy=(4820, 4410, 3280, 1950, 820, 480, 450, 460, 610, 1750, 3350, 4650,
                5010, 4700, 3500, 2100, 900, 510, 440, 455, 680, 1870, 3550, 4850),
    ),
    "cooling": Dataset(
        key="cooling",
        name="Retail - Cooling Dominant",
        description="25,000 sq ft retail in Houston. Monthly electricity (kWh). "
                    "Strong cooling dependency.",
        unit="kWh",
        fuel="Electricity",
        suggested_shape="3PC",
        months=_MONTHS,
        temps=(52, 56, 63, 70, 78, 84, 88, 89, 82, 72, 60, 53,
               50, 54, 61, 72, 80, 86, 90, 91, 84, 70, 62, 55),
        energy=(18200, 18500, 19800, 22400, 27600, 32100, 35400, 36200, 30800, 23500, 19200, 18300,
                18000, 18400, 19500, 23200, 29100, 33800, 36800, 37500, 31900, 22800, 19600, 18450),
    ),
    "mixed": Dataset(
        key="mixed",
        name="School - Mixed Heating & Cooling",
        description="75,000 sq ft K-8 school in Nashville. Monthly electricity (kWh). "
                    "Both loads visible.",
        unit="kWh",
        fuel="Electricity",
        suggested_shape="5P",
        months=_MONTHS,
        temps=(38, 42, 52, 60, 70, 78, 82, 81, 74, 62, 48, 40,
               36, 40, 50, 62, 72, 80, 84, 83, 76, 60, 46, 38),
        energy=(62000, 58500, 48000, 42500, 41000, 52000, 58000, 57500, 48000, 42000, 50000, 60000,
                64000, 60500, 49500, 42200, 42500, 55000, 60000, 59000, 50000, 41800, 52000, 62500),
    ),
}


def get_dataset(key: str) -> Dataset:
    """Look up a sample building by key ("heating", "cooling", "mixed")."""
    try:
        return DATASETS[key]
    except KeyError:
        raise ValueError(
            f"Unknown dataset {key!r}. Choose from {sorted(DATASETS)}"
        ) from None
