#!/usr/bin/env python3
"""
Deploy RIO to Soroban, add liquidity and trade through the Soroswap API.

Set SOROSWAP_API_KEY to execute the aggregator steps; without it they
are reported as simulated.
"""

from stellar_workshop.workflows.soroswap import main

if __name__ == "__main__":
    raise SystemExit(main())
