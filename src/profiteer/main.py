import uvicorn

from profiteer.core import settings
from profiteer.logger import get_logging_config


def main() -> None:
    uvicorn.run(
        "profiteer.app:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    main()
