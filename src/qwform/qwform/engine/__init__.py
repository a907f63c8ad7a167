"""qwform.engine - the attribute rewrite engine.

Leaf-first: segment parser, iteration stack, property path resolver,
reserved word guard, classification expander, directive dispatcher.
Submodules are imported directly; this package re-exports nothing.
"""
