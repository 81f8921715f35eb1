"""Command-line tools for the ledger"""
