"""Predefined report templates offered for one-click installation.

These are not persisted until installed; installation copies one entry into
report_templates under the installing user.
"""
import copy

REPORT_TYPES = ('financial', 'expense', 'payroll', 'accounting', 'tax', 'custom')

_PREDEFINED_TEMPLATES = [
    {
        'name': 'Monthly Revenue Report',
        'description': 'Monthly revenue breakdown by client and project',
        'report_type': 'financial',
        'query_template': '''
            SELECT
                c.name AS client_name,
                p.name AS project_name,
                SUM(i.total_amount) AS revenue,
                COUNT(i.id) AS invoice_count
            FROM invoices i
            LEFT JOIN clients c ON i.client_id = c.id
            LEFT JOIN projects p ON i.project_id = p.id
            WHERE i.status = 'paid'
              AND i.issue_date >= '{{start_date}}'
              AND i.issue_date <= '{{end_date}}'
            GROUP BY c.id, p.id
            ORDER BY revenue DESC
        ''',
        'parameters': {
            'start_date': {'type': 'date', 'required': True, 'label': 'Start Date'},
            'end_date': {'type': 'date', 'required': True, 'label': 'End Date'},
        },
    },
    {
        'name': 'Expense Analysis',
        'description': 'Expense breakdown by category and vendor',
        'report_type': 'expense',
        'query_template': '''
            SELECT
                ec.name AS category_name,
                v.name AS vendor_name,
                SUM(e.amount) AS total_amount,
                COUNT(e.id) AS expense_count
            FROM expenses e
            LEFT JOIN expense_categories ec ON e.category_id = ec.id
            LEFT JOIN vendors v ON e.vendor_id = v.id
            WHERE e.expense_date >= '{{start_date}}'
              AND e.expense_date <= '{{end_date}}'
            GROUP BY ec.id, v.id
            ORDER BY total_amount DESC
        ''',
        'parameters': {
            'start_date': {'type': 'date', 'required': True, 'label': 'Start Date'},
            'end_date': {'type': 'date', 'required': True, 'label': 'End Date'},
        },
    },
    {
        'name': 'Payroll Summary',
        'description': 'Monthly payroll summary by department',
        'report_type': 'payroll',
        'query_template': '''
            SELECT
                e.department,
                COUNT(p.id) AS employee_count,
                SUM(p.gross_salary) AS total_gross,
                SUM(p.total_deductions) AS total_deductions,
                SUM(p.net_salary) AS total_net
            FROM payslips p
            JOIN employees e ON p.employee_id = e.id
            JOIN payroll_runs pr ON p.payroll_run_id = pr.id
            WHERE pr.month = {{month}} AND pr.year = {{year}}
            GROUP BY e.department
            ORDER BY total_net DESC
        ''',
        'parameters': {
            'month': {'type': 'number', 'required': True, 'label': 'Month (1-12)'},
            'year': {'type': 'number', 'required': True, 'label': 'Year'},
        },
    },
    {
        'name': 'Account Balance Sheet',
        'description': 'Balance sheet with account balances',
        'report_type': 'accounting',
        'query_template': '''
            SELECT
                at.name AS account_type,
                a.account_number,
                a.name AS account_name,
                COALESCE(SUM(le.debit), 0) AS total_debits,
                COALESCE(SUM(le.credit), 0) AS total_credits,
                COALESCE(SUM(le.debit), 0) - COALESCE(SUM(le.credit), 0) AS balance
            FROM accounts a
            JOIN account_types at ON a.type_id = at.id
            LEFT JOIN ledger_entries le ON a.id = le.account_id
            LEFT JOIN journal_entries je ON le.journal_entry_id = je.id
            WHERE a.is_active = true
              AND (je.date <= '{{as_of_date}}' OR je.date IS NULL)
              AND (je.is_posted = true OR je.is_posted IS NULL)
            GROUP BY a.id, at.name
            ORDER BY at.name, a.account_number
        ''',
        'parameters': {
            'as_of_date': {'type': 'date', 'required': True, 'label': 'As of Date'},
        },
    },
]


def get_predefined_templates():
    """Return a copy of the predefined catalog."""
    return copy.deepcopy(_PREDEFINED_TEMPLATES)
