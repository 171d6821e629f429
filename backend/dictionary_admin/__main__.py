import uvicorn

from dictionary_admin.config import settings


def main() -> None:
    uvicorn.run(
        "dictionary_admin.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
