"""Protocol engine: framing, control-message codec, dispatch and player directory.

Everything in this package runs on the single thread that consumes the
server's standard output. Nothing here takes locks.
"""
