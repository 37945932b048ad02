"""Run the API with uvicorn: ``python -m transport_vendors``."""

import uvicorn

from transport_vendors.core.config import settings


def main() -> None:
    uvicorn.run(
        "transport_vendors.main:app",
        host="0.0.0.0",
        port=settings.app_port,
        reload=settings.app_env == "development",
    )


if __name__ == "__main__":
    main()
