"""create election tables

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-18 10:02:11.418203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('USER', 'ADMIN', name='userrole'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'elections',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('candidates', sa.JSON(), nullable=False),
        sa.Column('is_public_results', sa.Boolean(), nullable=False),
        sa.Column('status', sa.Enum('DRAFT', 'ACTIVE', 'CLOSED', name='electionstatus'), nullable=False),
        sa.Column('activated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_elections_status_schedule', 'elections', ['status', 'start_at', 'end_at'])
    op.create_index('idx_elections_created_by', 'elections', ['created_by'])

    op.create_table(
        'votes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('election_id', sa.String(), nullable=False),
        sa.Column('voter_id', sa.String(), nullable=False),
        sa.Column('candidate_id', sa.String(), nullable=False),
        sa.Column('ip_hash', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['election_id'], ['elections.id']),
        sa.ForeignKeyConstraint(['voter_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        # 선거당 1인 1표
        sa.UniqueConstraint('election_id', 'voter_id', name='uq_votes_election_voter'),
    )
    op.create_index('idx_votes_election_candidate', 'votes', ['election_id', 'candidate_id'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('action', sa.Enum(
            'ELECTION_CREATED', 'ELECTION_UPDATED', 'ELECTION_DELETED', 'ELECTION_ACTIVATED',
            'ELECTION_CLOSED', 'VOTE_CAST', 'USER_REGISTERED', 'USER_LOGGED_IN',
            name='auditaction'
        ), nullable=False),
        sa.Column('actor_id', sa.String(), nullable=False),
        sa.Column('election_id', sa.String(), nullable=True),
        sa.Column('election_title', sa.String(length=200), nullable=True),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('ip_hash', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_audit_logs_actor_created', 'audit_logs', ['actor_id', 'created_at'])
    op.create_index('idx_audit_logs_election_created', 'audit_logs', ['election_id', 'created_at'])
    op.create_index('idx_audit_logs_action_created', 'audit_logs', ['action', 'created_at'])

    op.create_table(
        'rate_limit_counters',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('scope', sa.String(length=50), nullable=False),
        sa.Column('client_key', sa.String(length=64), nullable=False),
        sa.Column('window_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('scope', 'client_key', 'window_start', name='uq_rate_limit_window'),
    )


def downgrade() -> None:
    # 테이블 삭제 (역순)
    op.drop_table('rate_limit_counters')
    op.drop_index('idx_audit_logs_action_created', table_name='audit_logs')
    op.drop_index('idx_audit_logs_election_created', table_name='audit_logs')
    op.drop_index('idx_audit_logs_actor_created', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index('idx_votes_election_candidate', table_name='votes')
    op.drop_table('votes')
    op.drop_index('idx_elections_created_by', table_name='elections')
    op.drop_index('idx_elections_status_schedule', table_name='elections')
    op.drop_table('elections')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    sa.Enum(name='auditaction').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='electionstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)
