"""Create jobs, applications, interviews and attachments tables

Revision ID: 001_create_lifecycle_tables
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_create_lifecycle_tables'
down_revision = None
branch_labels = None
depends_on = None


JOB_CATEGORIES = (
    'TECHNOLOGY', 'FINANCE', 'HEALTHCARE', 'EDUCATION', 'MARKETING', 'SALES',
    'DESIGN', 'ENGINEERING', 'OPERATIONS', 'HUMAN_RESOURCES', 'LEGAL',
    'CUSTOMER_SERVICE', 'MANUFACTURING', 'CONSULTING', 'MEDIA', 'GOVERNMENT',
    'NON_PROFIT', 'AGRICULTURE', 'CONSTRUCTION', 'HOSPITALITY', 'TRANSPORTATION',
    'RETAIL', 'REAL_ESTATE', 'TELECOMMUNICATIONS', 'OTHER',
)

job_category = sa.Enum(*JOB_CATEGORIES, name='job_category')
experience_level = sa.Enum(
    'ENTRY_LEVEL', 'MID_LEVEL', 'SENIOR_LEVEL', 'EXECUTIVE', name='experience_level'
)
job_type = sa.Enum(
    'FULL_TIME', 'PART_TIME', 'CONTRACT', 'INTERNSHIP', 'FREELANCE', name='job_type'
)
application_status = sa.Enum(
    'PENDING', 'REVIEWED', 'SHORTLISTED', 'REJECTED', 'HIRED', name='application_status'
)
interview_status = sa.Enum(
    'SCHEDULED', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'RESCHEDULED',
    name='interview_status',
)
attachment_type = sa.Enum(
    'IMAGE', 'DOCUMENT', 'RESUME', 'COVER_LETTER', 'PORTFOLIO', 'CERTIFICATE', 'OTHER',
    name='attachment_type',
)


def upgrade() -> None:
    """Create the lifecycle tables."""
    op.create_table(
        'jobs',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('employer_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('requirements', sa.JSON(), nullable=False),
        sa.Column('responsibilities', sa.JSON(), nullable=False),
        sa.Column('benefits', sa.JSON(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('category', job_category, nullable=False),
        sa.Column('experience_level', experience_level, nullable=True),
        sa.Column('job_type', job_type, nullable=False),
        sa.Column('salary_min', sa.Float(), nullable=True),
        sa.Column('salary_max', sa.Float(), nullable=True),
        sa.Column('is_remote', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('contact_phone', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_jobs_employer_id', 'jobs', ['employer_id'])
    op.create_index('ix_jobs_category', 'jobs', ['category'])
    op.create_index('ix_jobs_created_at', 'jobs', ['created_at'])
    op.create_index('idx_jobs_active_deadline', 'jobs', ['is_active', 'deadline'])
    op.create_index('idx_jobs_employer_created', 'jobs', ['employer_id', 'created_at'])

    op.create_table(
        'applications',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('job_id', sa.BigInteger(), nullable=False),
        sa.Column('job_seeker_id', sa.String(length=64), nullable=False),
        sa.Column('status', application_status, nullable=False, server_default='PENDING'),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('applied_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'job_seeker_id', name='uq_application_job_seeker'),
    )
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])
    op.create_index('ix_applications_job_seeker_id', 'applications', ['job_seeker_id'])
    op.create_index('ix_applications_status', 'applications', ['status'])
    op.create_index(
        'idx_applications_seeker_applied', 'applications', ['job_seeker_id', 'applied_at']
    )

    op.create_table(
        'interviews',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('application_id', sa.BigInteger(), nullable=False),
        sa.Column('scheduled_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('scheduled_time', sa.String(length=20), nullable=False),
        sa.Column('is_virtual', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('meeting_link', sa.String(length=500), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', interview_status, nullable=False, server_default='SCHEDULED'),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_interviews_application_id', 'interviews', ['application_id'])
    op.create_index('idx_interviews_status_date', 'interviews', ['status', 'scheduled_date'])

    op.create_table(
        'attachments',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('url', sa.String(length=1000), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('file_type', attachment_type, nullable=False, server_default='OTHER'),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('uploaded_by', sa.String(length=64), nullable=True),
        sa.Column('job_id', sa.BigInteger(), nullable=True),
        sa.Column('application_id', sa.BigInteger(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_attachments_job_id', 'attachments', ['job_id'])
    op.create_index('ix_attachments_application_id', 'attachments', ['application_id'])


def downgrade() -> None:
    """Drop the lifecycle tables and their enum types."""
    op.drop_index('ix_attachments_application_id', table_name='attachments')
    op.drop_index('ix_attachments_job_id', table_name='attachments')
    op.drop_table('attachments')

    op.drop_index('idx_interviews_status_date', table_name='interviews')
    op.drop_index('ix_interviews_application_id', table_name='interviews')
    op.drop_table('interviews')

    op.drop_index('idx_applications_seeker_applied', table_name='applications')
    op.drop_index('ix_applications_status', table_name='applications')
    op.drop_index('ix_applications_job_seeker_id', table_name='applications')
    op.drop_index('ix_applications_job_id', table_name='applications')
    op.drop_table('applications')

    op.drop_index('idx_jobs_employer_created', table_name='jobs')
    op.drop_index('idx_jobs_active_deadline', table_name='jobs')
    op.drop_index('ix_jobs_created_at', table_name='jobs')
    op.drop_index('ix_jobs_category', table_name='jobs')
    op.drop_index('ix_jobs_employer_id', table_name='jobs')
    op.drop_table('jobs')

    bind = op.get_bind()
    for enum_type in (
        attachment_type,
        interview_status,
        application_status,
        job_type,
        experience_level,
        job_category,
    ):
        enum_type.drop(bind, checkfirst=True)
