# accounting/__init__.py
"""
Accounting app - automatic double-entry bookkeeping for construction companies.

This app provides:
- Account: per-organization chart of accounts with hierarchy
- JournalEntry / JournalLine: balanced entries, one line per leg
- CategoryMapping: per-organization rubro -> account overrides
- AutoAccountingService: journal entries from bills, payments, payroll
  and treasury transactions

Commands handle all ledger mutations.
"""
