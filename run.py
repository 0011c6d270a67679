#!/usr/bin/env python3
"""Startup script for the journey API."""
import os
import uvicorn

from rentdesk.config import settings

if __name__ == "__main__":
    port = int(os.environ.get("PORT", settings.port))
    print(f"Starting RentDesk journey API on port {port}")
    uvicorn.run(
        "rentdesk.main:app",
        host=settings.host,
        port=port,
        log_level="info"
    )
