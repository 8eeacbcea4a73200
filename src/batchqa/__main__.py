"""Allow ``python -m batchqa <batch-directory>``."""

from batchqa.cli import run

if __name__ == "__main__":
    run()
