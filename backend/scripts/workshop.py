#!/usr/bin/env python3
"""Run the Stellar workshop: issue RIO, lock supply, pool it and trade."""

from stellar_workshop.workflows.workshop import main

if __name__ == "__main__":
    raise SystemExit(main())
