"""
Entry point for the lexicon vocabulary trainer.

Run with:
    lexicon --help
    python main.py study --mode learn
"""
from lexicon.delivery.cli import run

if __name__ == "__main__":
    run()
