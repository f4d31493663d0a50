"""Launch the polyline PIP FastAPI server."""

import logging

import uvicorn

from polyline_pip.config import get_settings


def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("polyline_pip.server:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
