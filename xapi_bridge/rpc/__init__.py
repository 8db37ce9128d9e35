"""
RPC Module.

TypedValue wire model, XML-RPC codec and the httpx channel that carries
calls to an xapi endpoint.
"""
