"""Module entrypoint for python -m ng_dev."""

from ng_dev.cli import app

if __name__ == "__main__":
    app(prog_name="ng-dev")
