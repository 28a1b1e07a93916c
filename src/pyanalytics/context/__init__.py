"""Context store layer.

This package owns the ambient key-value context attached to every
outgoing payload.  It is the only component allowed to write context keys.
"""
