#!/usr/bin/env python3
"""
YouTube API gateway web server
Run: python3 web_server.py
"""

import uvicorn

from tubegate.core.settings import get_settings


def main():
    """Run the gateway under uvicorn"""
    settings = get_settings()

    uvicorn.run(
        "tubegate.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development and settings.debug,
        log_level=settings.log_level.lower(),
        access_log=False
    )

if __name__ == "__main__":
    main()
