"""
xapi JSON bridge.

Runs a single xapi XML-RPC call from the command line inside a
login/logout session and prints the result as JSON.

Architecture:
- rpc: TypedValue wire model, XML-RPC codec, httpx channel
- mapping: CLI token inference, JSON conversion, response field extraction
- orchestration: session lifecycle and the target call
- core: configuration, logging, exceptions
"""

__version__ = "0.1.0"
