"""Run the upload service: ``python -m uploader``."""
import uvicorn

from uploader.config import load_settings
from uploader.main import create_app


def main() -> None:
    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
