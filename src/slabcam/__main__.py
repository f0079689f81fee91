"""Allow running slabcam as ``python -m slabcam``."""

from slabcam.cli import cli

if __name__ == "__main__":
    cli()
