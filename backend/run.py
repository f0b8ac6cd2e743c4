"""Run the server with the project's .env loaded"""
import os
import sys
from pathlib import Path

# Make backend/ importable regardless of the caller's working directory
BACKEND_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(BACKEND_DIR))

from dotenv import load_dotenv

load_dotenv(BACKEND_DIR.parent / ".env")

os.chdir(BACKEND_DIR)

if __name__ == "__main__":
    import uvicorn
    from lawdesk.core.config import get_settings

    settings = get_settings()

    from main import app

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )
