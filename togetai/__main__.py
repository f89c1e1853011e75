"""Run the service with uvicorn: ``python -m togetai``."""

import uvicorn

from togetai.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run("togetai.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
