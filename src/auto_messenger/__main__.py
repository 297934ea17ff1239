import uvicorn

from auto_messenger.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "auto_messenger.main:create_app",
        factory=True,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
