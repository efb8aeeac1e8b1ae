"""Core intermediate representation and markup rule modules.

WHY: The core package contains the stable heart of the renderer: the
IR dataclasses, the ordered rule pipeline and the public transform()
entry point. Formatters, the CLI and the API all build on it.

HOW: ir.py defines the data structures, rules.py holds one class per
markup rule plus the PIPELINE order, transformer.py exposes annotate()
and transform().

RULES:
- IR dataclasses are the contract — change with care
- Rule logic is format-agnostic — no HTML or JSON here
- Nothing in core performs I/O or keeps state between calls
"""
