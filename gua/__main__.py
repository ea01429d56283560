"""Run the backend with: python -m gua"""

import uvicorn

from gua.core.config import settings


def main() -> None:
    uvicorn.run(
        "gua.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
