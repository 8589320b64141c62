#!/usr/bin/env python3
"""
Run script for the VoiceLine backend
"""
import uvicorn

from voiceline.config.settings import settings
from voiceline.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
