"""
IffiDB - Record Console

A record-management console backed by local persistent storage, with a
text/voice command interface for operators.

DESIGN PRINCIPLES:
1. Views never touch storage; they go through the services
2. Every mutation is audited and announced to subscribers
3. The command console never crashes; failures become log lines
4. Optional platform capabilities degrade gracefully
"""

__version__ = "1.0.0"
__author__ = "IffiDB Team"
