# operations/__init__.py
"""
Operations app - the business documents of a construction company.

Bills, bill payments, generic payments, treasury transactions and payroll.
Each write calls the automatic accounting hook after the document is saved.
"""
