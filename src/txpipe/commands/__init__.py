"""
Command implementations for the txpipe CLI.

- send:   submit a transaction with raw call data
- invoke: submit a transaction packed from an ABI
- call:   read-only contract call
"""
