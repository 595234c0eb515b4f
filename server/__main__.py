# python -m server  /  start-server
import os

import uvicorn

from server.api.settings import Settings


def main() -> None:
    settings = Settings.from_env()

    uvicorn.run(
        "server.api.app:app",
        host=os.getenv("API_HOST", "127.0.0.1"),
        port=int(os.getenv("API_PORT", "3000")),
        reload=os.getenv("API_RELOAD", "0") == "1",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
