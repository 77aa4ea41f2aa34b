"""ASGI entry point.

Provides the FastAPI application instance as `app`.

Usage:
    - Deployed: uvicorn app:app --host 0.0.0.0 --port 8000
    - Local: uvicorn app:app --reload
"""

import sys
from pathlib import Path

# Add src to Python path for imports (MUST be before importing reqflow_api)
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from reqflow_api.main import create_app  # noqa: E402

app = create_app()
