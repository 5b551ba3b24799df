from __future__ import annotations

from alembic import op

revision = "0001_bank_statements"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Extensions for UUID generation (if not already present)
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS bank_accounts (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            bank_name TEXT NOT NULL,
            account_name TEXT,
            account_number TEXT,
            currency VARCHAR(8) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS bank_statement_uploads (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            bank_account_id UUID NOT NULL REFERENCES bank_accounts(id) ON DELETE CASCADE,
            upload_date TIMESTAMPTZ NOT NULL DEFAULT now(),
            statement_period TEXT NOT NULL,
            statement_start_date DATE,
            statement_end_date DATE,
            currency VARCHAR(8) NOT NULL,
            opening_balance NUMERIC(15,2) NOT NULL DEFAULT 0,
            closing_balance NUMERIC(15,2) NOT NULL DEFAULT 0,
            total_credits NUMERIC(15,2) NOT NULL DEFAULT 0,
            total_debits NUMERIC(15,2) NOT NULL DEFAULT 0,
            transaction_count INTEGER NOT NULL DEFAULT 0,
            file_url TEXT,
            uploaded_by UUID,
            status TEXT NOT NULL DEFAULT 'draft' CHECK (status IN ('draft', 'processing', 'completed', 'error')),
            error_message TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS bank_statement_lines (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            upload_id UUID NOT NULL REFERENCES bank_statement_uploads(id) ON DELETE CASCADE,
            bank_account_id UUID NOT NULL REFERENCES bank_accounts(id) ON DELETE CASCADE,
            line_number INTEGER NOT NULL,
            transaction_date DATE NOT NULL,
            description TEXT,
            reference TEXT,
            branch_code TEXT,
            debit_amount NUMERIC(15,2) NOT NULL DEFAULT 0,
            credit_amount NUMERIC(15,2) NOT NULL DEFAULT 0,
            running_balance NUMERIC(15,2),
            currency VARCHAR(8) NOT NULL,
            reconciliation_status TEXT NOT NULL DEFAULT 'unmatched'
                CHECK (reconciliation_status IN ('unmatched', 'matched', 'needs_review', 'recorded')),
            created_by UUID,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            CHECK ((debit_amount > 0) <> (credit_amount > 0))
        );
        """
    )

    op.execute("CREATE INDEX IF NOT EXISTS idx_bank_statement_uploads_account ON bank_statement_uploads (bank_account_id);")
    op.execute("CREATE INDEX IF NOT EXISTS idx_bank_statement_uploads_period ON bank_statement_uploads (statement_start_date, statement_end_date);")
    op.execute("CREATE INDEX IF NOT EXISTS idx_bank_statement_lines_upload ON bank_statement_lines (upload_id, line_number);")
    op.execute("CREATE INDEX IF NOT EXISTS idx_bank_statement_lines_account ON bank_statement_lines (bank_account_id);")
    op.execute("CREATE INDEX IF NOT EXISTS idx_bank_statement_lines_status ON bank_statement_lines (reconciliation_status);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bank_statement_lines;")
    op.execute("DROP TABLE IF EXISTS bank_statement_uploads;")
    op.execute("DROP TABLE IF EXISTS bank_accounts;")
