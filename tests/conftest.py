# tests/conftest.py
import sys
from pathlib import Path

# модули лежат в корне проекта: bot.py, converter.py, ...
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
