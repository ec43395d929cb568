"""Backend entrypoint for packaged builds; imports the app directly so a frozen bundle can resolve it."""
from fund_tracker.__main__ import main


if __name__ == "__main__":
    main()
