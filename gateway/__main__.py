import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    # Access lines are written by LoggingMiddleware
    uvicorn.run(
        "gateway.main:app",
        host=settings.host,
        port=settings.port,
        access_log=False,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
