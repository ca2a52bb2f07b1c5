"""Test fixtures for samlink.

Provides:
- Raw SAM.gov entity records
- Scripted registry and CRM fakes
- A controllable clock for TTL and dedup tests
"""

from .registry import *
