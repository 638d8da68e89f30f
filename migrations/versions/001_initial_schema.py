"""Initial schema for accounts, wallets, ledger, tournaments and game sessions

Revision ID: 001
Revises: 
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('email', name='uq_users_email')
    )

    # Create profiles table
    op.create_table('profiles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('wallet_balance', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('is_owner', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', name='uq_profiles_user_id')
    )
    op.create_index('idx_profiles_username', 'profiles', ['username'])
    op.create_index('idx_profiles_created', 'profiles', ['created_at'])

    # Create wallets table
    op.create_table('wallets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('bonus_balance', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('balance >= 0', name='chk_wallets_balance_nonneg'),
        sa.CheckConstraint('bonus_balance >= 0', name='chk_wallets_bonus_nonneg'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', name='uq_wallets_user_id')
    )

    # Create transactions table
    op.create_table('transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_id', sa.String(length=255), nullable=True),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount > 0', name='chk_transactions_amount_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_transactions_user_created', 'transactions', ['user_id', 'created_at'])
    op.create_index('idx_transactions_created', 'transactions', ['created_at'])

    # Create tournaments table
    op.create_table('tournaments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('game', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('banner_url', sa.String(length=500), nullable=True),
        sa.Column('entry_fee', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('prize_pool', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('max_players', sa.Integer(), nullable=False),
        sa.Column('current_players', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('max_players >= 1', name='chk_tournaments_max_players'),
        sa.CheckConstraint(
            'current_players >= 0 AND current_players <= max_players',
            name='chk_tournaments_current_players'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_tournaments_created', 'tournaments', ['created_at'])

    # Create tournament_participants table
    op.create_table('tournament_participants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tournament_id', 'user_id', name='uq_tournament_participants_pair')
    )
    op.create_index('idx_tournament_participants_user', 'tournament_participants', ['user_id'])

    # Create game_sessions table
    op.create_table('game_sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=True),
        sa.Column('game', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_game_sessions_user_created', 'game_sessions', ['user_id', 'created_at'])
    op.create_index('idx_game_sessions_status', 'game_sessions', ['status'])


def downgrade() -> None:
    op.drop_index('idx_game_sessions_status', table_name='game_sessions')
    op.drop_index('idx_game_sessions_user_created', table_name='game_sessions')
    op.drop_table('game_sessions')

    op.drop_index('idx_tournament_participants_user', table_name='tournament_participants')
    op.drop_table('tournament_participants')

    op.drop_index('idx_tournaments_created', table_name='tournaments')
    op.drop_table('tournaments')

    op.drop_index('idx_transactions_created', table_name='transactions')
    op.drop_index('idx_transactions_user_created', table_name='transactions')
    op.drop_table('transactions')

    op.drop_table('wallets')

    op.drop_index('idx_profiles_created', table_name='profiles')
    op.drop_index('idx_profiles_username', table_name='profiles')
    op.drop_table('profiles')

    op.drop_table('users')
