"""
Scheduling core

Pure slot arithmetic and the two busy checks the meeting state machine relies on:
- Slot normalization to the 30-minute UTC grid (clock.py)
- Daily window derived from event bounds (window.py)
- Optimistic busy pre-check over requests and locks (conflicts.py)
- Uniquely-keyed slot locks, the double-booking backstop (ledger.py)
"""
