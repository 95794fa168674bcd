"""Run the CodeTrac API. Usage: python run_api.py"""
import uvicorn

from api.main import app
from config import settings

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
