"""Create the data directory and bring the schema up to date."""
from pathlib import Path

from sync_app.database import run_migrations
from sync_app.logging_config import configure_logging


def main() -> None:
    configure_logging()
    data_dir = Path("data")
    data_dir.mkdir(exist_ok=True)
    run_migrations()
    print("Database initialised at", data_dir)


if __name__ == "__main__":
    main()
