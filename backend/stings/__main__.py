"""Run the service with uvicorn: `python -m stings`."""
import uvicorn

from stings.config import settings


def main() -> None:
    uvicorn.run("stings.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
