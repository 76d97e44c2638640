#!/usr/bin/env python3
"""Issue SAT1 and SAT2 and seed the XLM/SAT1, XLM/SAT2 and SAT1/SAT2 pools."""

from stellar_workshop.workflows.horizon_pools import main

if __name__ == "__main__":
    raise SystemExit(main())
