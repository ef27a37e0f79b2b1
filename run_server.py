#!/usr/bin/env python3
"""Run the Me-API Playground web server."""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from dotenv import load_dotenv
load_dotenv()


def main():
    import uvicorn

    from meapi.config import get_settings

    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"""
    ╔═══════════════════════════════════════════════════════╗
    ║           Me-API Playground Server                    ║
    ╠═══════════════════════════════════════════════════════╣
    ║  URL: http://{settings.API_HOST}:{settings.API_PORT:<5}                            ║
    ║  Health: /api/health      Profile: /api/profile       ║
    ║  API Docs: /docs          Hot Reload: {str(settings.API_RELOAD):<5}           ║
    ╚═══════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "server.app:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
