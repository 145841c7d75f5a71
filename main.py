import os
import sys
import traceback
from pathlib import Path

from dotenv import load_dotenv


def _unhandled_exception(exc_type, exc_value, exc_tb):
    """Print unhandled exceptions to stderr before exiting."""
    if exc_type is KeyboardInterrupt:
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    msg = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
    print("Unhandled exception:\n" + msg, file=sys.stderr, flush=True)


if __name__ == "__main__":
    """
    Entry point for the User Directory console.
    """
    root_dir = Path(__file__).resolve().parent

    # Load .env before reading USERDIR_CONFIG_DIR
    env_path = root_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    sys.excepthook = _unhandled_exception

    config_dir = os.getenv("USERDIR_CONFIG_DIR", str(root_dir / "config"))

    from ui.console import main

    try:
        main(config_dir)
    except Exception as e:
        print(f"\nFatal error: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)
