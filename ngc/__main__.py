"""Allow `python -m ngc`."""

from ngc.cli import main

if __name__ == "__main__":
    main()
