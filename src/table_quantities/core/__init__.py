"""
Expansion core: directive parsing, the recursive expansion engine, the
quantity ledger, hooks, and the draw interceptor.
"""
