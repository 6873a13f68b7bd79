"""Run the conversion service with uvicorn."""

import uvicorn

from .config import load_config
from .main import create_app


def main() -> None:
    config = load_config()
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
