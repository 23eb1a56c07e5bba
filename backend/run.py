"""
PrepTrack Backend Runner
Run with: python run.py
"""

import uvicorn
from preptrack.config import settings


if __name__ == "__main__":
    print(f"""
    PrepTrack - exam practice tracker

    Starting server at http://{settings.HOST}:{settings.PORT}

    API Documentation: http://localhost:{settings.PORT}/docs
    """)

    uvicorn.run(
        "preptrack.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
