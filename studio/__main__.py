"""``python -m studio`` and the installed ``studio`` console script."""

import main as _launcher


def __main__() -> None:
    _launcher.main()


if __name__ == "__main__":
    __main__()
