"""
healthmem server entry point.

Run with: python main.py
Or with uvicorn: uvicorn app:app --reload
"""

import os

import uvicorn

if __name__ == "__main__":
    is_dev = os.getenv("ENVIRONMENT", "development") == "development"

    uvicorn.run(
        "app:app",
        host=os.getenv("HEALTHMEM_HOST", "127.0.0.1"),
        port=int(os.getenv("HEALTHMEM_PORT", "8000")),
        reload=is_dev,
        log_level=os.getenv("HEALTHMEM_LOG_LEVEL", "info").lower(),
    )
