"""
Run the service with uvicorn:

    python -m apex_pdf_service

Host and port come from HOST / PORT (default 0.0.0.0:8080).
"""

import uvicorn

from .app import app, settings


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
