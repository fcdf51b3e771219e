"""Expense reimbursement API — submission, approval and reimbursement with an audit trail."""
