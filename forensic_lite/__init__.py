"""
Forensic Lite - Contradiction & Liability Analysis Engine
=========================================================

A minimal, standalone engine for:
1. Extracting attributed statements from evidentiary text
2. Resolving the people and organisations behind them
3. Detecting contradictions and behavioural manipulation patterns
4. Scoring liability per party
5. Recording every analytical action in a tamper-evident custody ledger

No database, no LLM, no auth required.
"""

__version__ = "1.0.0"
