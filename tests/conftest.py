import os
import sys
from pathlib import Path

import pytest

# Avoid GUI crashes in headless CI (Qt/PySide/PyQt etc.)
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src directory to path
src_dir = Path(__file__).parent.parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))


@pytest.fixture(scope="session")
def qapp():
    """A QCoreApplication so QTimer-backed helpers have an event dispatcher."""
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


SCENARIO_CSV = """time,lat,lon,temp,status
2024-01-01T00:00:00,60.10,24.90,1,A
2024-01-01T00:01:00,60.11,24.91,2,A
2024-01-01T00:02:00,60.12,24.92,,B
2024-01-01T00:03:00,60.13,24.93,4,B
"""


@pytest.fixture
def scenario_csv() -> str:
    return SCENARIO_CSV


def make_csv(n_rows: int, *, start: str = "2024-01-01", freq_seconds: int = 1) -> str:
    """Build a ``timestamp,speed,gear`` blob with ``n_rows`` evenly spaced rows."""
    import pandas as pd

    stamps = pd.date_range(start, periods=n_rows, freq=f"{freq_seconds}s")
    lines = ["timestamp,speed,gear"]
    for i, ts in enumerate(stamps):
        lines.append(f"{ts.isoformat()},{i * 0.5},{'G' + str((i // 100) % 4)}")
    return "\n".join(lines)
