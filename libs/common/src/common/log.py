import os

PREFIX = "cloudwatch_logs:"


def debug_enabled() -> bool:
    return os.getenv("CWLOGS_DEBUG", "").lower() in ("1", "true", "yes")


def log(message: str) -> None:
    print(f"{PREFIX} {message}", flush=True)


def debug(message: str) -> None:
    if debug_enabled():
        log(message)
