"""Run the counter demo: python -m relaycounter."""

import logging

from textual.logging import TextualHandler

from relaycounter.textual import ParentApp


def main() -> None:
    # Route records to the Textual devtools console, not the terminal the TUI owns.
    logging.basicConfig(level=logging.INFO, handlers=[TextualHandler()])
    app = ParentApp()
    try:
        app.run()
    finally:
        app.release()


if __name__ == "__main__":
    main()
