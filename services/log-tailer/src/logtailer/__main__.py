import signal
import threading

from .config import TailerConfig
from .tailer import LogTailer


def main() -> None:
    print("Starting CloudWatch Logs tailer")
    try:
        config = TailerConfig.from_env()
        tailer = LogTailer(config)
    except Exception as e:
        print(f"FATAL ERROR during initialization: {e}")
        raise

    finished = threading.Event()

    def handle_signal(signum, frame):
        print(f"Received signal {signum}, shutting down")
        finished.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    tailer.start()
    while not finished.wait(1):
        pass

    tailer.shutdown()
    print("Shutdown complete")


if __name__ == "__main__":
    main()
