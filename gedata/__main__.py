"""Allow gedata to be executable through `python -m gedata`."""
from gedata.cli import cli


if __name__ == "__main__":  # pragma: no cover
    cli(prog_name="gedata")
