"""Database schema initialization.

Contains the CREATE TABLE and CREATE INDEX statements for the reporting
tables and the users table they reference.

Called by database.init_db() when the schema is missing.
"""


def create_schema(conn, cursor):
    """Create all reporting tables and indexes.

    Args:
        conn: Database connection (for commit/rollback)
        cursor: Database cursor from get_cursor(conn)
    """
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            role TEXT NOT NULL DEFAULT 'user',
            is_active BOOLEAN DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    cursor.execute('''
        CREATE TABLE IF NOT EXISTS report_templates (
            id SERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            report_type TEXT NOT NULL,
            query_template TEXT,
            parameters JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_by INTEGER REFERENCES users(id),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # Templates referenced by saved reports cannot be deleted
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS saved_reports (
            id SERIAL PRIMARY KEY,
            template_id INTEGER NOT NULL REFERENCES report_templates(id) ON DELETE RESTRICT,
            name TEXT NOT NULL,
            parameters JSONB NOT NULL DEFAULT '{}'::jsonb,
            result_data JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_by INTEGER REFERENCES users(id),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    cursor.execute('CREATE INDEX IF NOT EXISTS idx_report_templates_type ON report_templates(report_type)')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_report_templates_created_by ON report_templates(created_by)')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_saved_reports_template ON saved_reports(template_id)')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_saved_reports_created_by ON saved_reports(created_by)')
    cursor.execute('CREATE INDEX IF NOT EXISTS idx_saved_reports_created_at ON saved_reports(created_at DESC)')
