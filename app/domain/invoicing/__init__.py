"""
Invoicing Domain

Payment reminder selection and delivery for unpaid invoices.
"""
