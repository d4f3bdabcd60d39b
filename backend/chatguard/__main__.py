"""
ChatGuard Backend — Entry Point
=================================

USAGE:
  python -m chatguard

  Binds to HOST:PORT from the environment (defaults 0.0.0.0:3000).
  API docs: http://localhost:3000/docs
"""

import uvicorn

from chatguard.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "chatguard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.app_env == "development",
        log_level=settings.log_level.lower(),
    )
