import asyncio

from rentbill.cli.app import main_menu
from rentbill.logging import configure_logging


def main() -> None:
    configure_logging()
    asyncio.run(main_menu())


if __name__ == "__main__":
    main()
