#!/usr/bin/env python3
"""
Standalone script to run the product configuration API
"""
import os
import sys
from pathlib import Path

# Add current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

if __name__ == "__main__":
    import uvicorn

    import settings

    host = os.getenv("HOST", "0.0.0.0")
    reload = os.getenv("NODE_ENV", "development") == "development"

    print(f"Starting FastAPI server on {host}:{settings.PORT}")
    print(f"Auto-reload: {reload}")
    print(f"API Documentation: http://{host}:{settings.PORT}/api/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=settings.PORT,
        reload=reload,
        log_level="info" if not reload else "debug"
    )
