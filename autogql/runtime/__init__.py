"""
Introspection, schema synthesis and resolver synthesis
"""
