"""Entry point for running codl as a module: python -m codl."""

from codl.cli import main

if __name__ == "__main__":
    main()
